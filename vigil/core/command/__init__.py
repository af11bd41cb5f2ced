"""Element command implementations."""

from vigil.core.command.base_element_command import BaseElementCommand
from vigil.core.command.element_commands import (
    GetAttribute,
    GetCssProperty,
    GetElementProperty,
    GetTagName,
    GetText,
    IsEnabled,
    IsPresent,
    IsSelected,
    IsVisible,
)

COMMANDS: dict[str, type[BaseElementCommand]] = {
    "is_visible": IsVisible,
    "is_enabled": IsEnabled,
    "is_selected": IsSelected,
    "is_present": IsPresent,
    "get_text": GetText,
    "get_tag_name": GetTagName,
    "get_attribute": GetAttribute,
    "get_element_property": GetElementProperty,
    "get_css_property": GetCssProperty,
}

__all__ = [
    "COMMANDS",
    "BaseElementCommand",
    "IsVisible",
    "IsEnabled",
    "IsSelected",
    "IsPresent",
    "GetText",
    "GetTagName",
    "GetAttribute",
    "GetElementProperty",
    "GetCssProperty",
]
