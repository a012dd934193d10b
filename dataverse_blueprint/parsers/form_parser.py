"""Parser for form XML script registrations."""

import html
import re

from dataverse_blueprint.domain.components import FormEventHandler
from dataverse_blueprint.domain.constants import (
    FORM_CONTROL_RE, FORM_EVENT_NAMES, FORM_EVENT_RE, FORM_HANDLER_RE,
    FORM_LIBRARY_RE, XML_ATTRIBUTE_PATTERN,
)


def _attribute(attrs: str, *names: str) -> str | None:
    for name in names:
        m = re.search(XML_ATTRIBUTE_PATTERN.format(name=name), attrs, re.I)
        if m:
            return html.unescape(m.group(1))
    return None


class FormParser:
    """Extracts script libraries and event handlers from form XML."""

    def parse_libraries(self, form_xml: str | None) -> list[str]:
        if not form_xml:
            return []
        return list(dict.fromkeys(FORM_LIBRARY_RE.findall(form_xml)))

    def parse_handlers(self, form_xml: str | None) -> list[FormEventHandler]:
        """Return OnLoad, OnSave, OnChange and TabStateChange handlers.

        OnChange handlers take their attribute from the event's
        ``attribute`` or, for control-level events, the enclosing
        control's ``datafieldname``.
        """
        if not form_xml:
            return []

        handlers: list[FormEventHandler] = []
        control_spans = []
        for control in FORM_CONTROL_RE.finditer(form_xml):
            control_spans.append(control.span(2))
            field = _attribute(control.group(1), 'datafieldname')
            handlers.extend(self._events(control.group(2), field))

        for event in FORM_EVENT_RE.finditer(form_xml):
            if any(start <= event.start() < end for start, end in control_spans):
                continue
            handlers.extend(self._event_handlers(event, None))
        return handlers

    def _events(self, xml: str, field: str | None) -> list[FormEventHandler]:
        found = []
        for event in FORM_EVENT_RE.finditer(xml):
            found.extend(self._event_handlers(event, field))
        return found

    def _event_handlers(self, event: re.Match, field: str | None) -> list[FormEventHandler]:
        name = (_attribute(event.group(1), 'name') or '').lower()
        event_name = FORM_EVENT_NAMES.get(name)
        if not event_name:
            return []
        attribute = None
        if event_name == 'OnChange':
            attribute = _attribute(event.group(1), 'attribute') or field

        handlers = []
        for handler in FORM_HANDLER_RE.finditer(event.group(2)):
            attrs = handler.group(1)
            function_name = _attribute(attrs, 'functionName')
            library = _attribute(attrs, 'libraryName', 'library')
            if not function_name or not library:
                continue
            enabled = (_attribute(attrs, 'enabled') or 'true').lower() != 'false'
            handlers.append(FormEventHandler(
                event=event_name,
                library_name=library,
                function_name=function_name,
                enabled=enabled,
                attribute=attribute,
                parameters=_attribute(attrs, 'parameters') or None,
            ))
        return handlers
