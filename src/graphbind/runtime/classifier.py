"""
Parameter classifier - maps call arguments to request roles.

Each declared parameter becomes a ParameterBinding with its role, effective
name and the value passed for this call (positional, keyword or default).
"""

from __future__ import annotations

from typing import Any

from ..core.defs import DOCUMENT_NAME
from ..core.descriptors import MethodDescriptor, ParameterBinding, ParameterDef, ParameterRole


class ParameterClassifier:
    """
    Groups call arguments by role.

    Usage:
        classifier = ParameterClassifier()
        groups = classifier.classify(method, args, kwargs)
        groups[ParameterRole.VARIABLE]  # bindings in declaration order
    """

    def classify(
        self,
        method: MethodDescriptor,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> dict[ParameterRole, list[ParameterBinding]]:
        """
        Classify the arguments of one call.

        Args:
            method: Descriptor of the invoked method
            args: Positional arguments (self excluded)
            kwargs: Keyword arguments

        Returns:
            Dict of role -> bindings, every role present, declaration order kept

        Raises:
            TypeError: If the arguments do not match the declared signature
        """
        values = self._bind_values(method, args, kwargs)

        groups: dict[ParameterRole, list[ParameterBinding]] = {role: [] for role in ParameterRole}
        for param in method.parameters:
            groups[param.role].append(
                ParameterBinding(
                    role=param.role,
                    name=self.effective_name(param),
                    value=values.get(param.name),
                    declared_type=param.annotation,
                )
            )
        return groups

    @staticmethod
    def effective_name(param: ParameterDef) -> str:
        """Explicit name if declared, the reserved document name token, else the parameter name."""
        if param.role == ParameterRole.DOCUMENT and param.is_document_name:
            return DOCUMENT_NAME
        return param.explicit_name or param.name

    def _bind_values(
        self,
        method: MethodDescriptor,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> dict[str, Any]:
        """Resolve the value of every parameter by name."""
        if method.signature is None:
            names = [param.name for param in method.parameters]
            if len(args) > len(names):
                raise TypeError(f"{method.name}() takes {len(names)} arguments but {len(args)} were given")
            values = dict(zip(names, args))
            for name, value in kwargs.items():
                if name not in names:
                    raise TypeError(f"{method.name}() got an unexpected keyword argument '{name}'")
                if name in values:
                    raise TypeError(f"{method.name}() got multiple values for argument '{name}'")
                values[name] = value
            missing = [name for name in names if name not in values]
            if missing:
                raise TypeError(f"{method.name}() missing required arguments: {', '.join(missing)}")
            return values

        # Declared signatures include self; bind against a placeholder
        bound = method.signature.bind(None, *args, **kwargs)
        bound.apply_defaults()
        return dict(bound.arguments)
