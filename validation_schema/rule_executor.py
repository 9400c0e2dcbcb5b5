import logging
import time
from typing import Any, Dict, List, Optional, Set, Tuple

from .registry import RuleRegistry
from .rule import RuleContext, SchemaOptions, SchemaRule
from .validators import ModelValidator, PropertyValidator, ValidatorKind

logger = logging.getLogger(__name__)

REF_PREFIXES = ("#/components/schemas/", "#/definitions/")


class RuleExecutor:
    """Applies registry rules to schemas, property by property, with timing"""

    def __init__(
        self,
        registry: RuleRegistry,
        options: Optional[SchemaOptions] = None,
        schemas: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        """
        Initialize rule executor.

        Args:
            registry: Rules to match against each validator
            options: Schema generation options passed to every RuleContext
            schemas: Named schemas (e.g. OpenAPI components.schemas) used to
                resolve $ref targets of child validators
        """
        self.registry = registry
        self.options = options or SchemaOptions()
        self.schemas = schemas if schemas is not None else {}

    def execute(
        self,
        schema: Dict[str, Any],
        model: ModelValidator,
        processed: Optional[Set[Tuple[str, int]]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Apply every matching rule for every validator of `model` to `schema`.

        Rules fire in registration order, and all matching rules fire, not
        just the first. The schema is mutated in place.

        Args:
            schema: Object schema of model.type_name (with "properties")
            model: Validators for the type
            processed: Schemas already handled in this pass, shared across
                calls so a type reached both directly and through a child
                validator is only processed once

        Returns:
            List of result dicts with structure:
            [{
                "rule": str,
                "schema_type": str,
                "property": str,
                "validator": str,
                "status": "APPLIED" | "ERROR",
                "message": str,
                "execution_time_ms": float,
            }, ...]
        """
        if processed is None:
            processed = set()
        return self._execute(schema, model, processed)

    def _execute(
        self,
        schema: Dict[str, Any],
        model: ModelValidator,
        processed: Set[Tuple[str, int]],
    ) -> List[Dict[str, Any]]:
        # Keyed by schema identity: inline schemas of one type are distinct
        key = (model.type_name, id(schema))
        if key in processed:
            return []
        processed.add(key)
        return self._execute_properties(schema, model, processed)

    def _execute_properties(
        self,
        schema: Dict[str, Any],
        model: ModelValidator,
        processed: Set[Tuple[str, int]],
    ) -> List[Dict[str, Any]]:
        results = []
        properties = schema.get("properties", {})

        for property_name in model.properties():
            if property_name not in properties:
                logger.debug(
                    f"Property '{model.type_name}.{property_name}' not in schema, skipped"
                )
                continue

            for validator in model.validators_for(property_name):
                if validator.kind is ValidatorKind.CHILD:
                    results.extend(
                        self._execute_child(properties[property_name], validator, processed)
                    )

                context = RuleContext(
                    schema=schema,
                    property_name=property_name,
                    validator=validator,
                    schema_type=model.type_name,
                    options=self.options,
                )
                for rule in self.registry.matching(validator):
                    results.append(self._apply_rule(rule, context))

        return results

    def _apply_rule(self, rule: SchemaRule, context: RuleContext) -> Dict[str, Any]:
        """Apply a single rule and record the outcome."""
        start = time.time()
        try:
            rule.apply(context)
            status, message = "APPLIED", ""
        except Exception as e:
            status = "ERROR"
            message = f"{type(e).__name__}: {e}"
            logger.warning(
                f"Error on apply rule '{rule.name}' for property "
                f"'{context.schema_type}.{context.property_name}': {message}"
            )
        elapsed_ms = round((time.time() - start) * 1000, 2)

        return {
            "rule": rule.name,
            "schema_type": context.schema_type,
            "property": context.property_name,
            "validator": context.validator.describe(),
            "status": status,
            "message": message,
            "execution_time_ms": elapsed_ms,
        }

    def _execute_child(
        self,
        property_schema: Dict[str, Any],
        validator: PropertyValidator,
        processed: Set[Tuple[str, int]],
    ) -> List[Dict[str, Any]]:
        """Recurse into the schema of a nested type described by a child validator."""
        child = validator.option("validator")
        if not isinstance(child, ModelValidator):
            logger.debug("Child validator without a ModelValidator, skipped")
            return []
        target = self._resolve_child_schema(property_schema)
        if target is None:
            logger.debug(
                f"No schema found for child type '{child.type_name}', skipped"
            )
            return []

        return self._execute(target, child, processed)

    def _resolve_child_schema(
        self, property_schema: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Inline object schema, array item schema, or the $ref target."""
        if property_schema.get("type") == "array" and isinstance(
            property_schema.get("items"), dict
        ):
            property_schema = property_schema["items"]

        if "properties" in property_schema:
            return property_schema

        ref = property_schema.get("$ref")
        if not ref:
            # allOf: [{$ref: ...}] is how nullable references are commonly written
            for entry in property_schema.get("allOf", []):
                if isinstance(entry, dict) and "$ref" in entry:
                    ref = entry["$ref"]
                    break
        if not ref:
            return None

        for prefix in REF_PREFIXES:
            if ref.startswith(prefix):
                return self.schemas.get(ref[len(prefix):])
        return None
