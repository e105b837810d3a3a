"""Capability registry and tool declarations.

 A *capability* (tool) is the execution unit for plan invocations.

 - The planner describes registered capabilities to the reasoning service.
 - The validator drops plan entries naming unregistered capabilities.
 - The executor resolves an invocation's tool name through
   ``CapabilityRegistry`` and calls the capability's handler.

 This package exports:

 - ``Capability``: name, description, parameter schema and handler.
 - ``ParameterSchema``/``ParameterSpec``: declared parameters.
 - ``CapabilityRegistry``: name → capability mapping.
 - ``SecurityProviders``/``build_security_capabilities``: built-in security tools.
 """

from .base import Capability, Handler, ParameterSchema, ParameterSpec
from .builtin import SecurityProviders, build_security_capabilities
from .registry import CapabilityRegistry

__all__ = [
    "Capability",
    "CapabilityRegistry",
    "Handler",
    "ParameterSchema",
    "ParameterSpec",
    "SecurityProviders",
    "build_security_capabilities",
]
