import importlib

mod = "schemaval"
class LazyLoader:
    """
    Lazy loader for the schemaval functions to keep import time low.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item.startswith('__'):
            raise AttributeError(item)
        if item in self._mappings:
            module_name, func_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, func_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the functions and their corresponding module paths
_mappings = {
    "validate": (f"{mod}.validator", "validate"),
    "report_errors": (f"{mod}.validator", "report_errors"),
    "is_required": (f"{mod}.validator", "is_required"),
    "SchemaValidator": (f"{mod}.validator", "SchemaValidator"),
    "Violation": (f"{mod}.context", "Violation"),
    "ValidationContext": (f"{mod}.context", "ValidationContext"),
    "BASIC_TYPE_VALIDATIONS": (f"{mod}.basictypes", "BASIC_TYPE_VALIDATIONS"),
    "SchemaStore": (f"{mod}.schemastore", "SchemaStore"),
    "load_schema": (f"{mod}.schemastore", "load_schema"),
    "clear_cache": (f"{mod}.schemastore", "clear_cache"),
    "SchemaValError": (f"{mod}.errors", "SchemaValError"),
    "SchemaResolutionError": (f"{mod}.errors", "SchemaResolutionError"),
    "SchemaShapeError": (f"{mod}.errors", "SchemaShapeError"),
    "TypePredicateError": (f"{mod}.errors", "TypePredicateError"),
    "validate_file": (f"{mod}.validatefiles", "validate_file"),
    "ValidationResult": (f"{mod}.validatefiles", "ValidationResult"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
