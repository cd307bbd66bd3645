"""Per-row validation of imported records with pydantic."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, create_model

Rules = Mapping[str, Any] | type[BaseModel]


class RecordValidator:
    """Validate imported records against a set of field rules.

    ``rules`` is either a pydantic model or a mapping of field name to a
    pydantic field definition::

        {
            "id": int,                                  # required
            "email": (str, Field(pattern=r".+@.+")),
            "note": (str | None, None),                 # optional
        }

    ``messages`` replaces pydantic's wording, keyed by
    ``"<field>.<error type>"`` (e.g. ``"id.int_parsing"``) or just
    ``"<field>"``.
    """

    def __init__(self, rules: Rules, messages: Mapping[str, str] | None = None) -> None:
        if isinstance(rules, type) and issubclass(rules, BaseModel):
            self.model = rules
        else:
            definitions = {
                name: rule if isinstance(rule, tuple) else (rule, ...)
                for name, rule in rules.items()
            }
            self.model = create_model(
                "ImportRecord",
                __config__=ConfigDict(extra="allow"),
                **definitions,
            )
        self.messages = dict(messages or {})

    def validate(self, record: Mapping[str, Any]) -> list[str]:
        """Return the error messages for ``record``; empty when it passes."""
        try:
            self.model.model_validate(dict(record))
        except ValidationError as e:
            return [self._message(error) for error in e.errors()]
        return []

    def _message(self, error: Mapping[str, Any]) -> str:
        field = ".".join(str(part) for part in error["loc"])
        for key in (f"{field}.{error['type']}", field):
            if key in self.messages:
                return self.messages[key]
        return f"{field}: {error['msg']}" if field else error["msg"]
