"""
After Effects Parameter Validator

Structural checks on caller-supplied arguments, applied before anything is
written to the mailbox. Every known argument name maps to an ArgShape, and
every ArgShape maps to exactly one check. Adding an argument is a table entry.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

MAX_RECOMMENDED_DIMENSION = 8192


class ArgShape(Enum):
    POSITIVE_INDEX = "positive integer"
    INDEX_LIST = "non-empty array of positive integers"
    PROPERTY_NAME = "animatable property name"
    PROPERTY_VALUE = "value matching propertyName"
    DIMENSION = "positive integer pixel size"
    NON_EMPTY_STRING = "non-empty string"
    STRING = "string"
    NUMBER = "number"
    NON_NEGATIVE_NUMBER = "number >= 0"
    POSITIVE_NUMBER = "number > 0"
    PERCENT = "number between 0 and 100"
    VECTOR = "array of at least 2 numbers"
    COLOR = "array of 3 or 4 numbers between 0 and 1"
    TEMPLATE_NAME = "effect template name"
    BOOLEAN = "boolean"
    OBJECT = "object"


class PropertyKind(Enum):
    VECTOR = "vector"
    SCALAR = "scalar"
    PERCENT = "percent"


ANIMATABLE_PROPERTIES: Dict[str, PropertyKind] = {
    "Position": PropertyKind.VECTOR,
    "Scale": PropertyKind.VECTOR,
    "Anchor Point": PropertyKind.VECTOR,
    "Rotation": PropertyKind.SCALAR,
    "Opacity": PropertyKind.PERCENT,
}

EFFECT_TEMPLATES: Tuple[str, ...] = (
    "gaussian-blur",
    "directional-blur",
    "color-balance",
    "brightness-contrast",
    "curves",
    "glow",
    "drop-shadow",
    "cinematic-look",
    "text-pop",
)

ARGUMENT_SHAPES: Dict[str, ArgShape] = {
    "compIndex": ArgShape.POSITIVE_INDEX,
    "layerIndex": ArgShape.POSITIVE_INDEX,
    "layerIndices": ArgShape.INDEX_LIST,
    "propertyName": ArgShape.PROPERTY_NAME,
    "value": ArgShape.PROPERTY_VALUE,
    "width": ArgShape.DIMENSION,
    "height": ArgShape.DIMENSION,
    "name": ArgShape.NON_EMPTY_STRING,
    "text": ArgShape.NON_EMPTY_STRING,
    "compName": ArgShape.STRING,
    "layerName": ArgShape.STRING,
    "expressionString": ArgShape.STRING,
    "effectMatchName": ArgShape.NON_EMPTY_STRING,
    "templateName": ArgShape.TEMPLATE_NAME,
    "timeInSeconds": ArgShape.NON_NEGATIVE_NUMBER,
    "startTime": ArgShape.NON_NEGATIVE_NUMBER,
    "duration": ArgShape.POSITIVE_NUMBER,
    "frameRate": ArgShape.POSITIVE_NUMBER,
    "pixelAspect": ArgShape.POSITIVE_NUMBER,
    "fontSize": ArgShape.POSITIVE_NUMBER,
    "strokeWidth": ArgShape.NON_NEGATIVE_NUMBER,
    "rotation": ArgShape.NUMBER,
    "opacity": ArgShape.PERCENT,
    "position": ArgShape.VECTOR,
    "scale": ArgShape.VECTOR,
    "anchorPoint": ArgShape.VECTOR,
    "size": ArgShape.VECTOR,
    "color": ArgShape.COLOR,
    "fillColor": ArgShape.COLOR,
    "strokeColor": ArgShape.COLOR,
    "skipErrors": ArgShape.BOOLEAN,
    "validateOnly": ArgShape.BOOLEAN,
    "effectSettings": ArgShape.OBJECT,
    "customSettings": ArgShape.OBJECT,
}

# Expressions can drive any property, not only the animatable transform set
OPERATION_SHAPE_OVERRIDES: Dict[str, Dict[str, ArgShape]] = {
    "setLayerExpression": {"propertyName": ArgShape.NON_EMPTY_STRING},
    "batchSetLayerExpressions": {"propertyName": ArgShape.NON_EMPTY_STRING},
}

HINTS: Dict[ArgShape, str] = {
    ArgShape.POSITIVE_INDEX: "Indices are 1-based integers: the first composition or layer is 1",
    ArgShape.INDEX_LIST: "Pass layer indices as a list of 1-based integers, e.g. [1, 2, 3]",
    ArgShape.PROPERTY_NAME: "Use one of: " + ", ".join(ANIMATABLE_PROPERTIES),
    ArgShape.PROPERTY_VALUE: "Position, Scale and Anchor Point take [x, y]; Rotation takes a number; Opacity takes 0-100",
    ArgShape.DIMENSION: "Width and height are whole pixel counts greater than 0",
    ArgShape.NON_EMPTY_STRING: "Provide a non-empty string",
    ArgShape.STRING: "Provide a string value",
    ArgShape.NUMBER: "Provide a plain number, not a string",
    ArgShape.NON_NEGATIVE_NUMBER: "Times are seconds from the start of the composition, 0 or greater",
    ArgShape.POSITIVE_NUMBER: "Provide a number greater than 0",
    ArgShape.PERCENT: "Percentages range from 0 to 100",
    ArgShape.VECTOR: "Provide an array such as [960, 540]",
    ArgShape.COLOR: "Colors are [r, g, b] with each component between 0 and 1",
    ArgShape.TEMPLATE_NAME: "Available templates: " + ", ".join(EFFECT_TEMPLATES),
    ArgShape.BOOLEAN: "Use true or false",
    ArgShape.OBJECT: "Provide a JSON object of name/value pairs",
}


@dataclass
class ValidationIssue:
    field: str
    message: str
    expected: str
    hint: str
    severity: str = "error"


@dataclass
class ValidationReport:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, issue: Optional[ValidationIssue]) -> None:
        if issue is None:
            return
        if issue.severity == "warning":
            self.warnings.append(issue)
        else:
            self.errors.append(issue)

    def extend(self, other: "ValidationReport") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def hints(self) -> List[str]:
        """Remediation steps for every error, with duplicates removed."""
        lines = [f"{issue.field}: {issue.message}. {issue.hint}" for issue in self.errors]
        return list(dict.fromkeys(lines))

    def warning_messages(self) -> List[str]:
        return [f"{issue.field}: {issue.message}" for issue in self.warnings]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _issue(field_name: str, shape: ArgShape, message: str, severity: str = "error") -> ValidationIssue:
    return ValidationIssue(field_name, message, shape.value, HINTS[shape], severity)


# Checks: (field, value, sibling args) -> issue or None

def _check_positive_index(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if _is_positive_int(value):
        return None
    return _issue(field_name, ArgShape.POSITIVE_INDEX, f"must be a positive integer (got {value!r})")


def _check_index_list(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if isinstance(value, list) and value and all(_is_positive_int(v) for v in value):
        return None
    return _issue(field_name, ArgShape.INDEX_LIST, f"must be a non-empty array of positive integers (got {value!r})")


def _check_property_name(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if isinstance(value, str) and value in ANIMATABLE_PROPERTIES:
        return None
    return _issue(field_name, ArgShape.PROPERTY_NAME, f"Invalid propertyName {value!r}")


def _check_property_value(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    prop = args.get("propertyName")
    kind = ANIMATABLE_PROPERTIES.get(prop) if isinstance(prop, str) else None
    if kind is None:
        # Names outside the animatable set carry no value constraint here.
        return None
    if kind is PropertyKind.VECTOR:
        if isinstance(value, list) and len(value) >= 2 and all(_is_number(v) for v in value):
            return None
        return _issue(field_name, ArgShape.PROPERTY_VALUE, f"{prop} expects an array of at least 2 numbers (got {value!r})")
    if not _is_number(value):
        return _issue(field_name, ArgShape.PROPERTY_VALUE, f"{prop} expects a single number (got {value!r})")
    if kind is PropertyKind.PERCENT and not 0 <= value <= 100:
        return _issue(field_name, ArgShape.PROPERTY_VALUE, f"{prop} must be between 0 and 100 (got {value!r})")
    return None


def _check_dimension(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if not _is_positive_int(value):
        return _issue(field_name, ArgShape.DIMENSION, f"must be a positive integer (got {value!r})")
    if value > MAX_RECOMMENDED_DIMENSION:
        return _issue(
            field_name,
            ArgShape.DIMENSION,
            f"{value} exceeds the recommended {MAX_RECOMMENDED_DIMENSION} pixels and may hurt performance",
            severity="warning",
        )
    return None


def _check_non_empty_string(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if isinstance(value, str) and value.strip():
        return None
    return _issue(field_name, ArgShape.NON_EMPTY_STRING, f"is required and must be a non-empty string (got {value!r})")


def _check_string(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if isinstance(value, str):
        return None
    return _issue(field_name, ArgShape.STRING, f"must be a string (got {value!r})")


def _check_number(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if _is_number(value):
        return None
    return _issue(field_name, ArgShape.NUMBER, f"must be a number (got {value!r})")


def _check_non_negative_number(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if _is_number(value) and value >= 0:
        return None
    return _issue(field_name, ArgShape.NON_NEGATIVE_NUMBER, f"must be a number >= 0 (got {value!r})")


def _check_positive_number(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if _is_number(value) and value > 0:
        return None
    return _issue(field_name, ArgShape.POSITIVE_NUMBER, f"must be a number > 0 (got {value!r})")


def _check_percent(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if _is_number(value) and 0 <= value <= 100:
        return None
    return _issue(field_name, ArgShape.PERCENT, f"must be a number between 0 and 100 (got {value!r})")


def _check_vector(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if isinstance(value, list) and len(value) >= 2 and all(_is_number(v) for v in value):
        return None
    return _issue(field_name, ArgShape.VECTOR, f"must be an array of at least 2 numbers (got {value!r})")


def _check_color(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if isinstance(value, list) and len(value) in (3, 4) and all(_is_number(c) and 0 <= c <= 1 for c in value):
        return None
    return _issue(field_name, ArgShape.COLOR, f"must be an array of 3 or 4 numbers between 0 and 1 (got {value!r})")


def _check_template_name(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if value in EFFECT_TEMPLATES:
        return None
    return _issue(field_name, ArgShape.TEMPLATE_NAME, f"Invalid templateName {value!r}")


def _check_boolean(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if isinstance(value, bool):
        return None
    return _issue(field_name, ArgShape.BOOLEAN, f"must be true or false (got {value!r})")


def _check_object(field_name: str, value: Any, args: Mapping[str, Any]) -> Optional[ValidationIssue]:
    if isinstance(value, dict):
        return None
    return _issue(field_name, ArgShape.OBJECT, f"must be an object (got {value!r})")


ShapeCheck = Callable[[str, Any, Mapping[str, Any]], Optional[ValidationIssue]]

SHAPE_CHECKS: Dict[ArgShape, ShapeCheck] = {
    ArgShape.POSITIVE_INDEX: _check_positive_index,
    ArgShape.INDEX_LIST: _check_index_list,
    ArgShape.PROPERTY_NAME: _check_property_name,
    ArgShape.PROPERTY_VALUE: _check_property_value,
    ArgShape.DIMENSION: _check_dimension,
    ArgShape.NON_EMPTY_STRING: _check_non_empty_string,
    ArgShape.STRING: _check_string,
    ArgShape.NUMBER: _check_number,
    ArgShape.NON_NEGATIVE_NUMBER: _check_non_negative_number,
    ArgShape.POSITIVE_NUMBER: _check_positive_number,
    ArgShape.PERCENT: _check_percent,
    ArgShape.VECTOR: _check_vector,
    ArgShape.COLOR: _check_color,
    ArgShape.TEMPLATE_NAME: _check_template_name,
    ArgShape.BOOLEAN: _check_boolean,
    ArgShape.OBJECT: _check_object,
}

_unchecked = set(ArgShape) - set(SHAPE_CHECKS)
if _unchecked:
    raise RuntimeError(f"ArgShape members without a check: {sorted(s.name for s in _unchecked)}")


@dataclass(frozen=True)
class BatchSpec:
    items_field: str
    max_items: int
    item_required: Tuple[str, ...] = ()


BATCH_OPERATIONS: Dict[str, BatchSpec] = {
    "batchCreateTextLayers": BatchSpec("textLayers", 50, ("text",)),
    "batchCreateShapeLayers": BatchSpec("shapeLayers", 50),
    "batchCreateSolidLayers": BatchSpec("solidLayers", 50),
    "batchSetLayerProperties": BatchSpec("layerProperties", 100, ("layerIndex",)),
    "batchSetLayerKeyframes": BatchSpec("keyframes", 200, ("layerIndex", "propertyName", "timeInSeconds", "value")),
    "batchSetLayerExpressions": BatchSpec("expressions", 100, ("layerIndex", "propertyName", "expressionString")),
    "batchApplyEffectTemplates": BatchSpec("effectApplications", 50, ("layerIndex",)),
}


def validate_fields(
    args: Mapping[str, Any], prefix: str = "", shapes: Mapping[str, ArgShape] = ARGUMENT_SHAPES
) -> ValidationReport:
    """Check every argument whose name has a declared shape; others pass through."""
    report = ValidationReport()
    for name, value in args.items():
        shape = shapes.get(name)
        if shape is None:
            continue
        report.add(SHAPE_CHECKS[shape](f"{prefix}{name}", value, args))
    return report


def validate_batch(
    batch: BatchSpec, args: Mapping[str, Any], shapes: Mapping[str, ArgShape] = ARGUMENT_SHAPES
) -> ValidationReport:
    report = ValidationReport()
    items = args.get(batch.items_field)
    if items is None:
        # Absence is reported by the registry's required-parameter check.
        return report
    if not isinstance(items, list) or not items:
        report.add(
            ValidationIssue(
                batch.items_field,
                f"must be a non-empty array (got {items!r})",
                "non-empty array of objects",
                f"Provide between 1 and {batch.max_items} item objects",
            )
        )
        return report
    if len(items) > batch.max_items:
        report.add(
            ValidationIssue(
                batch.items_field,
                f"contains {len(items)} items, the limit is {batch.max_items}",
                f"at most {batch.max_items} items",
                "Split the batch into several smaller calls",
            )
        )
    for index, item in enumerate(items):
        prefix = f"{batch.items_field}[{index}]."
        if not isinstance(item, dict):
            report.add(
                ValidationIssue(
                    f"{batch.items_field}[{index}]",
                    f"must be an object (got {item!r})",
                    "object",
                    HINTS[ArgShape.OBJECT],
                )
            )
            continue
        missing = [name for name in batch.item_required if name not in item]
        if missing:
            report.add(
                ValidationIssue(
                    f"{batch.items_field}[{index}]",
                    f"missing required fields: {', '.join(missing)}",
                    "object with " + ", ".join(batch.item_required),
                    "Every item needs " + ", ".join(batch.item_required),
                )
            )
        report.extend(validate_fields(item, prefix, shapes))
    return report


def validate_arguments(operation: str, args: Mapping[str, Any]) -> ValidationReport:
    """Validate the argument bag for one registry operation."""
    shapes = {**ARGUMENT_SHAPES, **OPERATION_SHAPE_OVERRIDES.get(operation, {})}
    report = validate_fields(args, shapes=shapes)
    batch = BATCH_OPERATIONS.get(operation)
    if batch is not None:
        report.extend(validate_batch(batch, args, shapes))
    return report


# Standalone predicates

def validate_positive_index(value: Any, field_name: str = "layerIndex") -> ValidationReport:
    report = ValidationReport()
    report.add(_check_positive_index(field_name, value, {}))
    return report


def validate_property_name(value: Any) -> ValidationReport:
    report = ValidationReport()
    report.add(_check_property_name("propertyName", value, {}))
    return report


def validate_property_value(property_name: str, value: Any) -> ValidationReport:
    args = {"propertyName": property_name, "value": value}
    report = validate_property_name(property_name)
    report.add(_check_property_value("value", value, args))
    return report


def validate_dimensions(width: Any, height: Any) -> ValidationReport:
    report = ValidationReport()
    report.add(_check_dimension("width", width, {}))
    report.add(_check_dimension("height", height, {}))
    return report
