"""
Public API for validation-schema

This is the "front door" - the main entry point for applying validation rules
to OpenAPI / JSON-Schema documents.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .config_loader import ConfigLoader
from .registry import RuleRegistry
from .schema_engine import SchemaEngine
from .validators import ModelValidator

logger = logging.getLogger(__name__)


class SchemaRuleService:
    """
    Main schema rule service class.

    Derives schema constraints (required, minLength, maxLength, pattern,
    format, minimum, maximum, ...) from validator descriptors by running them
    through a registry of schema rules.

    Example:
        from validation_schema import ModelValidator, SchemaRuleService

        account = ModelValidator("Account")
        account.rule_for("userName").not_empty().maximum_length(50)

        schema = {"type": "object", "properties": {"userName": {"type": "string"}}}
        service = SchemaRuleService()
        service.apply_rules(schema, account)
        # schema["required"] == ["userName"]
        # schema["properties"]["userName"]["maxLength"] == 50
    """

    def __init__(
        self,
        config_override_uri: Optional[str] = None,
        registry: Optional[RuleRegistry] = None,
    ):
        """
        Initialize the service with bundled configuration.

        Args:
            config_override_uri: Optional path or URI of a YAML file merged over
                the bundled schema-config.yaml
            registry: Optional prebuilt registry, used instead of the one
                assembled from configuration

        Raises:
            ValueError: If configuration values are invalid
            RuntimeError: If a remote override cannot be fetched
        """
        self._config_override_uri = config_override_uri
        self._registry = registry
        self._initialize()

    def _initialize(self):
        """Internal initialization logic (used by __init__ and reload_config)."""
        self.config_loader = ConfigLoader(self._config_override_uri)
        self.engine = SchemaEngine(self.config_loader, registry=self._registry)

    @property
    def registry(self) -> RuleRegistry:
        return self.engine.registry

    def apply_rules(
        self,
        schema: Dict[str, Any],
        model: ModelValidator,
        schemas: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Apply validation rules for one type to its schema, in place.

        Args:
            schema: Object schema with a "properties" mapping
            model: Validators declared for the type
            schemas: Optional named schemas for resolving $ref of child validators

        Returns:
            List of result dicts, each containing:
                - rule: Name of the applied rule
                - schema_type: Declaring type name
                - property: Property name
                - validator: Validator description, e.g. "maximum_length(max=50)"
                - status: "APPLIED" or "ERROR"
                - message: Error description (empty when applied)
                - execution_time_ms: Execution time

        Example:
            results = service.apply_rules(schema, account)
            for result in results:
                if result['status'] == 'ERROR':
                    print(f"{result['rule']} on {result['property']}: {result['message']}")
        """
        return self.engine.apply_rules(schema, model, schemas)

    def apply_components(
        self, components: Dict[str, Dict[str, Any]], models: Iterable[ModelValidator]
    ) -> List[Dict[str, Any]]:
        """
        Apply validators to a set of named schemas (e.g. OpenAPI components.schemas).

        Each model is applied to the schema named model.type_name. Child
        validators follow $ref links into the same mapping.

        Returns:
            Concatenated result dicts (same format as apply_rules())
        """
        return self.engine.apply_components(components, models)

    def apply_document(
        self, document: Dict[str, Any], models: Iterable[ModelValidator]
    ) -> List[Dict[str, Any]]:
        """
        Apply validators to a full OpenAPI 3 document or JSON Schema with definitions.

        Looks for components.schemas first, then definitions.

        Raises:
            ValueError: If the document has neither
        """
        components = (document.get("components") or {}).get("schemas")
        if components is None:
            components = document.get("definitions")
        if components is None:
            raise ValueError(
                "Document has no components.schemas or definitions section"
            )
        return self.apply_components(components, models)

    def discover_rules(self) -> Dict[str, Dict[str, Any]]:
        """
        Discover registered rules in application order.

        Returns:
            Dict mapping rule name to {name, position, condition_count, source}

        Example:
            for name, meta in service.discover_rules().items():
                print(f"{meta['position']}: {name} ({meta['source']})")
        """
        return self.engine.discover_rules()

    def check_schema(self, schema: Dict[str, Any]) -> None:
        """
        Check a generated schema against the dialect's metaschema.

        Raises:
            jsonschema.SchemaError: If the schema is invalid
        """
        self.engine.check_schema(schema)

    def validate_instance(self, schema: Dict[str, Any], instance: Any) -> List[Dict[str, str]]:
        """
        Validate data against a generated schema.

        Returns:
            List of {"path", "message"} dicts; empty when valid
        """
        return self.engine.validate_instance(schema, instance)

    def reload_config(self):
        """
        Reload configuration and rebuild the rule registry.

        Clears cached remote overrides first, so a remote override is fetched
        again.

        Raises:
            ValueError, RuntimeError: As for __init__
        """
        self.config_loader.clear_cache()
        self._initialize()
        logger.info("Configuration reloaded")

    def get_config_age(self):
        """
        Get age of the loaded configuration in seconds.

        Returns:
            float: Age in seconds, or None if not loaded
        """
        return self.config_loader.get_config_age()
