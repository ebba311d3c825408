from typing import Dict, Optional

ANALYSIS_PROMPTS: Dict[str, str] = {
    "structure": (
        "Please analyze the current After Effects project structure, including composition hierarchy, "
        "layer organization, resource usage and project complexity."
    ),
    "performance": (
        "Please evaluate project performance, including rendering efficiency, memory usage, "
        "cache status and potential bottlenecks."
    ),
    "optimization": (
        "Please suggest project optimizations, including pre-composing, proxy usage, "
        "effect optimization and workflow improvements."
    ),
    "comprehensive": (
        "Please perform a comprehensive project analysis covering structure, performance, "
        "optimization opportunities and best practices."
    ),
}

ANIMATION_GUIDES: Dict[str, str] = {
    "text": "a text animation (appearance, disappearance and dynamic effects)",
    "logo": "a logo animation (brand reveal)",
    "transition": "a transition animation (scene switching)",
    "ui": "a UI animation (interface element motion)",
    "motion-graphics": "a motion graphics piece (compound graphic animation)",
}

_TRUTHY = {"yes", "true", "1", "on"}


def analyze_project(analysis_type: str = "comprehensive", include_recommendations: Optional[str] = None) -> str:
    """Prompt asking the model to gather project data through the tools and report on it."""
    intro = ANALYSIS_PROMPTS.get(analysis_type, ANALYSIS_PROMPTS["comprehensive"])
    recommendations = str(include_recommendations or "").strip().lower() in _TRUTHY

    sections = [
        intro,
        "Please structure the analysis as follows:",
        "## 📊 Project Overview\n"
        "- Total compositions and their types\n"
        "- Total layers and average complexity\n"
        "- Effects and plugins in use\n"
        "- Project item count",
        "## 🔍 Detailed Analysis\n"
        "- Project structure hierarchy\n"
        "- Resource utilization\n"
        "- Performance hot spots\n"
        "- Potential issues",
    ]
    if recommendations:
        sections.append(
            "## 💡 Optimization Suggestions\n"
            "- Structure improvements\n"
            "- Performance improvements\n"
            "- Workflow improvements"
        )
    sections.append(
        "Start by reading the aftereffects://project/info and aftereffects://compositions resources, "
        "or run the getProjectInfo and listCompositions scripts."
    )
    return "\n\n".join(sections)


def create_animation(
    animation_type: str = "text",
    style: str = "modern",
    duration: Optional[str] = None,
    complexity: Optional[str] = None,
) -> str:
    """Prompt walking the model through planning and building an animation with the tools."""
    guide = ANIMATION_GUIDES.get(animation_type, ANIMATION_GUIDES["text"])
    return (
        f"Please help me create {guide}.\n\n"
        "## 🎬 Animation Requirements\n"
        f"- **Type**: {animation_type}\n"
        f"- **Style**: {style}\n"
        f"- **Duration**: {duration or 'TBD'} seconds\n"
        f"- **Complexity**: {complexity or 'Medium'}\n\n"
        "## 🛠️ Production Plan\n"
        "1. **Breakdown**: split the animation into key steps\n"
        "2. **Layers**: which layers are needed and how they are structured\n"
        "3. **Keyframes**: times and values of the main keyframes\n"
        "4. **Effects**: recommended effect templates and settings\n"
        "5. **Optimization**: prefer batch scripts (batchCreateTextLayers, batchSetLayerKeyframes)\n\n"
        "Then build it step by step with the run-script tool and confirm each step with get-results."
    )
