"""Nominal marker base classes for model standardization.

`DomainModel` is the base for Pydantic-based configuration and API models,
`InternalDTO` marks the frozen dataclasses the repair engine passes around.
"""

from __future__ import annotations

from pydantic import BaseModel


class DomainModel(BaseModel):
    """Nominal marker for Pydantic-based domain and API models."""

    def __repr__(self) -> str:
        """Provide a concise, one-line summary of the object."""
        class_name = self.__class__.__name__

        repr_attrs = ("field_label", "name")
        for attr in repr_attrs:
            if hasattr(self, attr):
                attr_value = getattr(self, attr)
                if attr_value is not None:
                    return f'<{class_name} {attr}="{attr_value}">'

        return f"<{class_name}>"


class InternalDTO:
    """Nominal marker for internal dataclass DTOs.

    This is a plain marker class intended to be mixed into dataclass
    definitions to make their intent explicit for mypy checks.
    """
