import logging
from typing import Any, Dict, Iterable, List, Optional

from jsonschema import Draft4Validator, Draft7Validator

from .default_rules import default_rules
from .registry import RuleRegistry
from .rule_executor import RuleExecutor
from .rule_loader import RuleLoader
from .validators import ModelValidator

logger = logging.getLogger(__name__)

# Metaschema used to check generated schemas, per dialect
DIALECT_VALIDATORS = {
    "openapi3": Draft4Validator,
    "jsonschema": Draft7Validator,
}


class SchemaEngine:
    """Core schema generation logic, independent of how it is called"""

    def __init__(self, config_loader, registry: Optional[RuleRegistry] = None):
        """
        Initialize schema engine from configuration.

        Args:
            config_loader: ConfigLoader instance
            registry: Optional prebuilt registry. When omitted, the registry is
                the built-in rules minus `disabled_rules`, plus `extra_rules`.

        Raises:
            ValueError: If a disabled rule name is unknown
            ImportError, AttributeError, TypeError: If an extra rule cannot be loaded
        """
        self.config_loader = config_loader
        self.options = config_loader.get_options()
        self.rule_loader = RuleLoader()
        self.registry = registry if registry is not None else self._build_registry()

    def _build_registry(self) -> RuleRegistry:
        registry = RuleRegistry(default_rules())

        for name in self.config_loader.get_disabled_rules():
            if not registry.remove(name):
                raise ValueError(
                    f"Cannot disable unknown rule '{name}'. "
                    f"Known rules: {', '.join(registry.names())}"
                )

        for reference in self.config_loader.get_extra_rules():
            for rule in self.rule_loader.load_reference(reference):
                # Extra rules named like a built-in replace it in place
                registry.override(rule, source=reference)

        return registry

    def apply_rules(
        self,
        schema: Dict[str, Any],
        model: ModelValidator,
        schemas: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Apply the registry to one type schema.

        Args:
            schema: Object schema for model.type_name, mutated in place
            model: Validators for the type
            schemas: Named schemas used to resolve $ref targets of child validators

        Returns:
            List of per-rule result dicts (see RuleExecutor.execute)
        """
        executor = RuleExecutor(self.registry, self.options, schemas)
        return executor.execute(schema, model)

    def apply_components(
        self, components: Dict[str, Dict[str, Any]], models: Iterable[ModelValidator]
    ) -> List[Dict[str, Any]]:
        """
        Apply each model validator to the component schema named after its type.

        Args:
            components: Mapping of type name to schema (e.g. components.schemas)
            models: Validators; a model whose type has no schema is skipped

        Returns:
            Concatenated result dicts for all models
        """
        executor = RuleExecutor(self.registry, self.options, components)
        # Shared across models so a type reached through a child validator
        # is not processed again as a top-level model
        processed = set()
        results = []
        for model in models:
            schema = components.get(model.type_name)
            if schema is None:
                logger.debug(f"No schema for type '{model.type_name}', skipped")
                continue
            results.extend(executor.execute(schema, model, processed))
        return results

    def discover_rules(self) -> Dict[str, Dict[str, Any]]:
        """
        Discover registered rules and their metadata.

        Returns:
            Dict mapping rule name to:
            - name: Rule name
            - position: Index in registration (= application) order
            - condition_count: Number of match predicates
            - source: "default" or the config reference that supplied it
        """
        result = {}
        for position, (rule, source) in enumerate(self.registry.entries()):
            # Duplicate names: first one wins, as with registry.get()
            result.setdefault(
                rule.name,
                {
                    "name": rule.name,
                    "position": position,
                    "condition_count": len(rule.conditions),
                    "source": source,
                },
            )
        return result

    def check_schema(self, schema: Dict[str, Any]) -> None:
        """
        Check a schema against the configured dialect's metaschema.

        Raises:
            jsonschema.SchemaError: If the schema is not valid
        """
        DIALECT_VALIDATORS[self.options.schema_dialect].check_schema(schema)

    def validate_instance(
        self, schema: Dict[str, Any], instance: Any
    ) -> List[Dict[str, str]]:
        """
        Validate data against a generated schema.

        OpenAPI-only keywords such as `nullable` are ignored by the
        metaschema validators.

        Returns:
            List of {"path": str, "message": str}; empty if the instance is valid
        """
        validator_class = DIALECT_VALIDATORS[self.options.schema_dialect]
        validator = validator_class(schema, format_checker=validator_class.FORMAT_CHECKER)

        errors = []
        found = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
        for error in found:
            path = " -> ".join(str(p) for p in error.path) if error.path else "root"
            errors.append({"path": path, "message": error.message})
        return errors
