"""Parser for business rule markup.

Business rules store their logic as an embedded markup blob with
``<condition>`` and ``<action>`` clauses nested inside ``<and>``/``<or>``
groups. Decoding is regex based and never raises: any failure is
reported on the returned definition as ``parse_error``.
"""

import html
import logging
import re

from dataverse_blueprint.domain.components import Action, BusinessRuleDefinition, Condition
from dataverse_blueprint.domain.constants import (
    ACTION_TYPES, NO_CONDITIONS_LOGIC, OPERATOR_DISPLAY_NAMES, RULE_ACTION_RE,
    RULE_CONDITION_RE, RULE_GROUP_TAG_RE, RULE_PARAMETER_PATTERN,
    UNPARSEABLE_CONDITIONS_LOGIC,
)
from dataverse_blueprint.domain.enums import ActionType, ExecutionContext

logger = logging.getLogger(__name__)

_ACTION_PARAMETERS = ('field', 'value', 'message')
_PARAMETER_RES = {
    name: re.compile(RULE_PARAMETER_PATTERN.format(name=re.escape(name)), re.I)
    for name in _ACTION_PARAMETERS
}


class BusinessRuleParser:
    """Decodes business rule markup into a BusinessRuleDefinition."""

    def parse(self, markup: str | None) -> BusinessRuleDefinition:
        if markup is None or (isinstance(markup, str) and not markup.strip()):
            return BusinessRuleDefinition(condition_logic=NO_CONDITIONS_LOGIC)

        try:
            conditions = self._parse_conditions(markup)
            actions = self._parse_actions(markup)
            return BusinessRuleDefinition(
                conditions=conditions,
                actions=actions,
                execution_context=self.execution_context(actions),
                condition_logic=self.render_logic(conditions),
            )
        except Exception as e:
            logger.warning("Failed to parse business rule definition: %s", e)
            return BusinessRuleDefinition(
                condition_logic=UNPARSEABLE_CONDITIONS_LOGIC,
                parse_error=str(e) or type(e).__name__,
            )

    def _parse_conditions(self, markup: str) -> list[Condition]:
        conditions = []
        for m in RULE_CONDITION_RE.finditer(markup):
            raw_operator = m.group(2)
            conditions.append(Condition(
                field=m.group(1),
                operator=OPERATOR_DISPLAY_NAMES.get(raw_operator.lower(), raw_operator),
                value=html.unescape(m.group(3)),
                logic_operator=self._connective_at(markup, m.start()),
                raw_operator=raw_operator,
            ))
        return conditions

    def _connective_at(self, markup: str, position: int) -> str:
        """Return the connective of the innermost group open at ``position``."""
        open_groups: list[str] = []
        for tag in RULE_GROUP_TAG_RE.finditer(markup, 0, position):
            name = tag.group(2).lower()
            if not tag.group(1):
                open_groups.append(name)
            elif open_groups and open_groups[-1] == name:
                open_groups.pop()
        if open_groups and open_groups[-1] == 'or':
            return 'OR'
        return 'AND'

    def _parse_actions(self, markup: str) -> list[Action]:
        actions = []
        for m in RULE_ACTION_RE.finditer(markup):
            body = m.group(2)
            params = {}
            for name, pattern in _PARAMETER_RES.items():
                found = pattern.search(body)
                params[name] = html.unescape(found.group(1)) if found else None
            actions.append(Action(
                type=ACTION_TYPES.get(m.group(1).strip().lower(), ActionType.SET_VALUE),
                **params,
            ))
        return actions

    @staticmethod
    def execution_context(actions: list[Action]) -> ExecutionContext:
        """Client for visual-only rules, Server for data-only, Both when mixed."""
        has_visual = any(a.type.is_visual for a in actions)
        has_data = any(not a.type.is_visual for a in actions)
        if has_visual and has_data:
            return ExecutionContext.BOTH
        if has_data:
            return ExecutionContext.SERVER
        return ExecutionContext.CLIENT

    @staticmethod
    def render_logic(conditions: list[Condition]) -> str:
        if not conditions:
            return NO_CONDITIONS_LOGIC
        parts = []
        for i, c in enumerate(conditions):
            clause = f"{c.field} {c.operator} '{c.value}'"
            parts.append(clause if i == 0 else f"{c.logic_operator} {clause}")
        return 'IF ' + ' '.join(parts)
