"""
SMOKE TESTS - Module Import Validation

These tests verify that all ledger modules can be imported without errors.
They catch issues like:
- Missing imports
- Undefined variables (logger not defined)
- Circular imports

If these fail, DO NOT DEPLOY.
"""
import os
import sys

# Add service directory to path
app_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
if app_dir not in sys.path:
    sys.path.insert(0, app_dir)


class TestModuleImports:
    """Verify all critical modules can be imported."""

    def test_import_main(self):
        """Main FastAPI app must import without errors."""
        import main
        assert hasattr(main, 'app')

    def test_import_models(self):
        """Database models must import."""
        import models
        for name in ('Twig', 'Leaf', 'Sprout', 'WaterEntry', 'SunEntry', 'LedgerState'):
            assert hasattr(models, name), name

    def test_import_schemas(self):
        import schemas
        assert hasattr(schemas, 'GraftRequest')
        assert hasattr(schemas, 'TimelineResponse')

    def test_import_services(self):
        import reflection_gate
        import resource_ledger
        import sprout_lifecycle_service
        import timeline
        assert hasattr(sprout_lifecycle_service, 'SproutLifecycleService')
        assert hasattr(resource_ledger, 'ResourceLedger')
        assert hasattr(reflection_gate, 'ReflectionGate')
        assert hasattr(timeline, 'build_timeline')

    def test_import_periodic_tasks(self):
        """Celery app and beat schedule must import."""
        import periodic_tasks
        assert 'replenish-sun' in periodic_tasks.celery_app.conf.beat_schedule

    def test_import_logging_config(self):
        import logging_config
        logger = logging_config.get_logger("smoke")
        assert logger is not None


class TestExceptionMapping:

    def test_every_ledger_exception_has_a_status(self):
        from exceptions import BaseLedgerException, EXCEPTION_TO_STATUS

        for exc_type in BaseLedgerException.__subclasses__():
            assert exc_type in EXCEPTION_TO_STATUS, exc_type.__name__

    def test_to_dict_shape(self):
        from exceptions import InsufficientResource

        payload = InsufficientResource(resource="soil", required=20, available=5).to_dict()

        assert payload["error"]["code"] == "InsufficientResource"
        assert payload["error"]["details"] == {"resource": "soil", "required": 20, "available": 5}
