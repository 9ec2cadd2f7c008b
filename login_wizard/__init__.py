"""Matrix login wizard - password login and email-verified password reset."""

import importlib as _importlib
from typing import TYPE_CHECKING, Any

__version__ = "0.3.0"
__license__ = "Apache-2.0"

if TYPE_CHECKING:
    from .core.exceptions import InvalidFlowStateError as InvalidFlowStateError
    from .core.exceptions import LoginWizardError as LoginWizardError
    from .core.exceptions import TransportError as TransportError
    from .core.logger import setup_structured_logging as setup_structured_logging
    from .core.settings import WizardSettings as WizardSettings
    from .services.auth.wizard import LoginWizard as LoginWizard

# Explicit lazy-loading map: name -> (module_path, attribute_name)
_LAZY_MODULE_MAP = {
    # Core
    "LoginWizardError": ("login_wizard.core.exceptions", "LoginWizardError"),
    "TransportError": ("login_wizard.core.exceptions", "TransportError"),
    "InvalidFlowStateError": ("login_wizard.core.exceptions", "InvalidFlowStateError"),
    "WizardSettings": ("login_wizard.core.settings", "WizardSettings"),
    "setup_structured_logging": ("login_wizard.core.logger", "setup_structured_logging"),
    # Services
    "LoginWizard": ("login_wizard.services.auth.wizard", "LoginWizard"),
}

__all__ = list(_LAZY_MODULE_MAP.keys())


def __getattr__(name: str) -> Any:
    """Lazy import with explicit mapping - importlib based."""
    if name in _LAZY_MODULE_MAP:
        module_path, attr_name = _LAZY_MODULE_MAP[name]
        module = _importlib.import_module(module_path)
        attr = getattr(module, attr_name)
        # Cache in module globals to avoid repeated imports
        globals()[name] = attr
        return attr
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
