"""
After Effects Script Registry

Allow-list of operations the bridge panel knows how to run. Anything not
listed here is rejected before the mailbox is touched.
"""

from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

EstimatedTime = Literal["Quick", "Medium", "Long"]


class ScriptInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    category: str
    estimated_time: EstimatedTime
    required_params: Tuple[str, ...] = ()

    def to_contract(self) -> Dict[str, Any]:
        """Camel-cased view handed to front-end callers."""
        return {
            "description": self.description,
            "category": self.category,
            "requiredParams": list(self.required_params),
            "estimatedTime": self.estimated_time,
        }


ALLOWED_SCRIPTS: Dict[str, ScriptInfo] = {
    # Information retrieval
    "listCompositions": ScriptInfo(
        description="List all compositions in the project",
        category="project",
        estimated_time="Quick",
    ),
    "getProjectInfo": ScriptInfo(
        description="Get project detailed information",
        category="project",
        estimated_time="Quick",
    ),
    "getLayerInfo": ScriptInfo(
        description="Get current composition layer information",
        category="layers",
        estimated_time="Medium",
    ),
    # Creation
    "createComposition": ScriptInfo(
        description="Create new composition",
        category="creation",
        estimated_time="Quick",
        required_params=("name",),
    ),
    "createTextLayer": ScriptInfo(
        description="Create text layer",
        category="creation",
        estimated_time="Quick",
        required_params=("text",),
    ),
    "createShapeLayer": ScriptInfo(
        description="Create shape layer (rectangle, ellipse, polygon, star)",
        category="creation",
        estimated_time="Quick",
    ),
    "createSolidLayer": ScriptInfo(
        description="Create solid or adjustment layer",
        category="creation",
        estimated_time="Quick",
    ),
    # Batch creation
    "batchCreateTextLayers": ScriptInfo(
        description="Batch create multiple text layers",
        category="batch-creation",
        estimated_time="Medium",
        required_params=("textLayers",),
    ),
    "batchCreateShapeLayers": ScriptInfo(
        description="Batch create multiple shape layers",
        category="batch-creation",
        estimated_time="Medium",
        required_params=("shapeLayers",),
    ),
    "batchCreateSolidLayers": ScriptInfo(
        description="Batch create multiple solid layers",
        category="batch-creation",
        estimated_time="Medium",
        required_params=("solidLayers",),
    ),
    # Modification
    "setLayerProperties": ScriptInfo(
        description="Set layer transform, text and timing properties",
        category="modification",
        estimated_time="Quick",
    ),
    "setLayerKeyframe": ScriptInfo(
        description="Set a keyframe on a layer property",
        category="animation",
        estimated_time="Quick",
        required_params=("compIndex", "layerIndex", "propertyName", "timeInSeconds", "value"),
    ),
    "setLayerExpression": ScriptInfo(
        description="Set or remove an expression on a layer property",
        category="animation",
        estimated_time="Quick",
        required_params=("compIndex", "layerIndex", "propertyName", "expressionString"),
    ),
    # Batch modification
    "batchSetLayerProperties": ScriptInfo(
        description="Batch set layer properties (up to 100 layers)",
        category="batch-modification",
        estimated_time="Medium",
        required_params=("layerProperties",),
    ),
    "batchSetLayerKeyframes": ScriptInfo(
        description="Batch set keyframes (up to 200 keyframes)",
        category="batch-animation",
        estimated_time="Long",
        required_params=("keyframes",),
    ),
    "batchSetLayerExpressions": ScriptInfo(
        description="Batch set expressions",
        category="batch-animation",
        estimated_time="Medium",
        required_params=("expressions",),
    ),
    # Effects
    "applyEffect": ScriptInfo(
        description="Apply a single effect by match name or display name",
        category="effects",
        estimated_time="Medium",
    ),
    "applyEffectTemplate": ScriptInfo(
        description="Apply a preset effect template",
        category="effects",
        estimated_time="Medium",
        required_params=("templateName",),
    ),
    "batchApplyEffects": ScriptInfo(
        description="Apply effects to several layers of one composition",
        category="effects",
        estimated_time="Long",
        required_params=("compName", "layerIndices"),
    ),
    "batchApplyEffectTemplates": ScriptInfo(
        description="Batch apply effect templates",
        category="batch-effects",
        estimated_time="Long",
        required_params=("effectApplications",),
    ),
    # Testing & debugging
    "test-animation": ScriptInfo(
        description="Test animation functionality",
        category="testing",
        estimated_time="Quick",
    ),
    "bridgeTestEffects": ScriptInfo(
        description="Test MCP bridge communication",
        category="testing",
        estimated_time="Quick",
    ),
}

CATEGORIES: Tuple[str, ...] = tuple(dict.fromkeys(info.category for info in ALLOWED_SCRIPTS.values()))


def lookup(name: str, scripts: Mapping[str, ScriptInfo] = ALLOWED_SCRIPTS) -> Optional[ScriptInfo]:
    return scripts.get(name)


def missing_required_params(info: ScriptInfo, args: Mapping[str, Any]) -> List[str]:
    """Every required name absent from args, in declared order."""
    return [param for param in info.required_params if param not in args]


def scripts_by_category(scripts: Mapping[str, ScriptInfo] = ALLOWED_SCRIPTS) -> Dict[str, List[str]]:
    grouped: Dict[str, List[str]] = {}
    for name, info in scripts.items():
        grouped.setdefault(info.category, []).append(name)
    return grouped


def registry_contract(scripts: Mapping[str, ScriptInfo] = ALLOWED_SCRIPTS) -> Dict[str, Dict[str, Any]]:
    return {name: info.to_contract() for name, info in scripts.items()}
