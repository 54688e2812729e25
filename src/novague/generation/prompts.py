"""Stage prompts sent to the generation backend.

Each builder turns the prior artifacts into the natural-language request for
one stage; the backend appends the JSON schema of the expected artifact.
"""

from __future__ import annotations

import json

from novague.models.analysis import ProjectAnalysis
from novague.models.components import ComponentArchitecture
from novague.models.data import DataArchitecture
from novague.models.ux import ScreenAnalysis


def _dump(value: object) -> str:
    return json.dumps(value, ensure_ascii=False)


def analysis_prompt(idea: str) -> str:
    """Prompt for stage 1."""
    return f"""
Analyze the following project idea and propose a technical architecture.
Idea: "{idea}"

Provide a comprehensive analysis including:
1. Project name (creative and relevant)
2. Summary
3. Project type (web, mobile, desktop, api, hybrid)
4. Recommended tech stack for frontend, backend and deployment
5. Core features (list of key functionalities)
6. User roles with permissions
7. Business rules
8. Complexity estimate, development time and team size
9. Reasoning for the choices
"""


def ux_prompt(analysis: ProjectAnalysis) -> str:
    """Prompt for stage 2."""
    return f"""
Based on the project analysis, design the UX architecture: screens, user flows
and background processes.

Project: {analysis.project_name}
Summary: {analysis.summary}
Core features: {_dump(analysis.core_features)}
User roles: {_dump([role.name for role in analysis.user_roles])}

Requirements:
1. Define screens with unique kebab-case ids, routes, types and auth levels.
2. Define user flows for the key features; steps reference screen ids.
3. Identify the background processes the features need.
"""


def data_prompt(analysis: ProjectAnalysis, ux: ScreenAnalysis) -> str:
    """Prompt for stage 3."""
    return f"""
Design the data architecture (database and APIs) from the project requirements
and UX flow.

Project: {analysis.project_name}
Database: {analysis.tech_stack.backend.database}
User flows: {_dump([flow.name for flow in ux.user_flows])}
Screens: {_dump([screen.id for screen in ux.screens])}

Requirements:
1. Design database tables with fields, types and constraints (PostgreSQL compatible).
2. Design the REST endpoints the screens and flows need; list consuming screen
   ids in usedByScreens and touched tables in relatedTables.
3. Define row-level security policies.
"""


def components_prompt(ux: ScreenAnalysis, data: DataArchitecture) -> str:
    """Prompt for stage 4."""
    return f"""
Design the component architecture from the UX flow and data architecture.

Screens: {_dump([screen.id for screen in ux.screens])}
APIs: {_dump([endpoint.signature for endpoint in data.endpoints])}

Requirements:
1. Break each screen into a layout plus feature and UI components.
2. Identify shared components reused across screens.
3. Define props, state and dependencies; reference APIs as "METHOD /path"
   exactly as listed above and other components by name.
"""


def validation_prompt(
    analysis: ProjectAnalysis,
    ux: ScreenAnalysis,
    data: DataArchitecture,
    components: ComponentArchitecture,
) -> str:
    """Prompt for stage 5."""
    component_apis = {
        component.id: component.dependencies.apis
        for component in components.all_components()
        if component.dependencies.apis
    }
    return f"""
Validate the integration of this design and score it from 0 to 100.

Project: {analysis.project_name}
Admin screens: {_dump([s.id for s in ux.screens if s.authentication == "admin"])}
APIs: {_dump([endpoint.signature for endpoint in data.endpoints])}
Component API usage: {_dump(component_apis)}

Requirements:
1. Check for missing dependencies (components using APIs that do not exist).
2. Identify security gaps (admin screens using unauthenticated APIs).
3. Detect circular component dependencies.
4. Provide suggestions and optimizations.
"""
