"""Migration guidance for legacy workflows."""

from dataverse_blueprint.domain.components import (
    ClassicWorkflow, MigrationFeature, MigrationRecommendation,
)
from dataverse_blueprint.domain.constants import (
    BACKGROUND_ADVISORY, BASIC_OPERATIONS_FEATURE, DEFAULT_MIGRATION_CHALLENGE,
    MIGRATION_CHALLENGES, MIGRATION_DOCS_URL, MIGRATION_EFFORT, MIGRATION_FEATURES,
    REAL_TIME_ADVISORY,
)
from dataverse_blueprint.domain.enums import Complexity

REAL_TIME_MODE = 1


def _mentions(features: list[MigrationFeature], fragment: str) -> bool:
    return any(fragment in f.feature for f in features)


class WorkflowMigrationAnalyzer:
    """Grades a legacy workflow's migration effort from its XAML."""

    def analyze(self, workflow: ClassicWorkflow) -> MigrationRecommendation:
        features = self.detect_features(workflow.xaml)
        complexity = self.complexity(features, workflow.mode)
        return MigrationRecommendation(
            complexity=complexity,
            effort=MIGRATION_EFFORT[complexity.value],
            approach=self.approach(workflow, features),
            challenges=self.challenges(features),
            features=features,
            advisory=self.advisory(workflow),
            documentation_link=MIGRATION_DOCS_URL,
        )

    def detect_features(self, xaml: str | None) -> list[MigrationFeature]:
        xaml = xaml or ''
        found = [
            MigrationFeature(feature, recommendation, path)
            for feature, (markers, recommendation, path) in MIGRATION_FEATURES.items()
            if any(marker in xaml for marker in markers)
        ]
        return found or [MigrationFeature(*BASIC_OPERATIONS_FEATURE)]

    @staticmethod
    def complexity(features: list[MigrationFeature], mode: int) -> Complexity:
        if _mentions(features, 'Custom') or _mentions(features, 'Deprecated'):
            return Complexity.CRITICAL
        if _mentions(features, 'Child Workflows') or _mentions(features, 'Wait'):
            return Complexity.HIGH
        if mode == REAL_TIME_MODE:
            return Complexity.HIGH
        # Medium needs branching or stage logic plus more than three features
        if ((_mentions(features, 'Conditional') or _mentions(features, 'Stage'))
                and len(features) > 3):
            return Complexity.MEDIUM
        return Complexity.LOW

    @staticmethod
    def approach(workflow: ClassicWorkflow, features: list[MigrationFeature]) -> str:
        steps = ['1. Create a new cloud flow in Power Automate']
        triggers = [
            label for label, enabled in (
                ('added', workflow.trigger_on_create),
                ('modified', workflow.trigger_on_update),
                ('deleted', workflow.trigger_on_delete),
            ) if enabled
        ]
        if triggers:
            steps.append(f"2. Set trigger: When a row is {', '.join(triggers)}")
        elif workflow.on_demand:
            steps.append('2. Set trigger: When a flow is run from the command bar')

        steps.append('3. Add actions for each workflow step:')
        steps.extend(f"   - {f.feature}: {f.recommendation}" for f in features)
        steps.extend([
            '4. Test the flow thoroughly in development environment',
            '5. Deactivate the classic workflow',
            '6. Activate the new cloud flow',
            '7. Monitor for any issues and adjust as needed',
        ])
        return '\n'.join(steps)

    @staticmethod
    def challenges(features: list[MigrationFeature]) -> list[str]:
        challenges = [text for fragment, text in MIGRATION_CHALLENGES if _mentions(features, fragment)]
        return challenges or [DEFAULT_MIGRATION_CHALLENGE]

    @staticmethod
    def advisory(workflow: ClassicWorkflow) -> str:
        if workflow.mode == REAL_TIME_MODE or workflow.mode_name == 'RealTime':
            return REAL_TIME_ADVISORY
        return BACKGROUND_ADVISORY
