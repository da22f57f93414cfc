"""
Shared pieces of the request param schemas.

Params arrive as strings from query strings and form bodies, and as native
values from JSON bodies; the annotated types below accept both. Validation
errors are turned into ``ValidationException`` by ``parse_params`` so every
endpoint answers with the same ``invalid_request_error`` envelope.
"""

from typing import Annotated, Any, ClassVar, TypeVar

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_core import ErrorDetails, PydanticCustomError

from paysim.core.exceptions.types import ValidationException

SUPPORTED_CURRENCIES = frozenset(
    {
        "aud", "brl", "cad", "chf", "cny", "czk", "dkk", "eur", "gbp", "hkd",
        "huf", "inr", "jpy", "krw", "mxn", "myr", "nok", "nzd", "pln", "ron",
        "sek", "sgd", "thb", "usd", "zar",
    }
)

# Error types raised by our own validators; they are already API error codes.
API_ERROR_CODES = frozenset(
    {"parameter_missing", "parameter_invalid", "parameter_invalid_integer"}
)
_INTEGER_ERRORS = frozenset({"int_parsing", "int_from_float", "int_type"})

ModelT = TypeVar("ModelT", bound=BaseModel)


def coerce_list(value: Any) -> list[Any]:
    """Normalise a scalar-or-list parameter (``expand``, ``enabled_events``) to a list."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, dict):
        return list(value.values())
    return [value]


def _reject_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise PydanticCustomError(
            "parameter_invalid_integer", "Invalid integer: {value}", {"value": value}
        )
    return value


def _positive(value: int) -> int:
    if value < 1:
        raise PydanticCustomError("parameter_invalid_integer", "Invalid positive integer")
    return value


def _non_negative(value: int) -> int:
    if value < 0:
        raise PydanticCustomError(
            "parameter_invalid_integer", "Invalid non-negative integer"
        )
    return value


def _currency(value: str) -> str:
    code = value.lower()
    if code not in SUPPORTED_CURRENCIES:
        raise PydanticCustomError(
            "parameter_invalid",
            "Invalid currency: {currency}. Stripe currently supports these "
            "currencies: {supported}",
            {"currency": code, "supported": ", ".join(sorted(SUPPORTED_CURRENCIES))},
        )
    return code


FormInt = Annotated[int, BeforeValidator(_reject_bool)]
PositiveInt = Annotated[int, BeforeValidator(_reject_bool), AfterValidator(_positive)]
NonNegativeInt = Annotated[
    int, BeforeValidator(_reject_bool), AfterValidator(_non_negative)
]
Currency = Annotated[str, AfterValidator(_currency)]
FormList = Annotated[list[str], BeforeValidator(coerce_list)]
Metadata = dict[str, Any]


def missing_param(param: str) -> PydanticCustomError:
    """Error for a model-level "one of these is required" check."""
    return PydanticCustomError(
        "parameter_missing", "Missing required param: {param}.", {"param": param}
    )


class ParamsModel(BaseModel):
    """
    Base of every request param schema.

    Unknown params are kept (clients send ``expand`` and other fields the
    simulator ignores). An empty string means "not given" on create and list
    requests; update schemas set ``blank_unsets`` so that ``""`` clears a field.
    """

    model_config = ConfigDict(extra="allow")

    blank_unsets: ClassVar[bool] = False

    @model_validator(mode="before")
    @classmethod
    def drop_blank_params(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if cls.blank_unsets:
            return {key: None if value == "" else value for key, value in values.items()}
        return {key: value for key, value in values.items() if value != ""}


class ListParams(ParamsModel):
    """Cursor pagination params shared by every list endpoint."""

    limit: FormInt | None = None
    starting_after: str | None = None
    ending_before: str | None = None

    @field_validator("limit")
    @classmethod
    def limit_in_range(cls, value: int | None, info: ValidationInfo) -> int | None:
        max_limit = (info.context or {}).get("max_limit", 100)
        if value is not None and not 1 <= value <= max_limit:
            raise PydanticCustomError(
                "parameter_invalid_integer",
                "Invalid limit: must be between 1 and {max_limit}",
                {"max_limit": max_limit},
            )
        return value


def param_name(loc: tuple[int | str, ...], extra: str | None = None) -> str | None:
    """
    Render an error location in bracket notation.

    List positions are left out, so ``("items", 0, "price")`` becomes
    ``items[price]``.
    """
    names = [str(part) for part in loc if not isinstance(part, int)]
    if extra:
        names.append(extra)
    if not names:
        return None
    return names[0] + "".join(f"[{name}]" for name in names[1:])


def to_validation_exception(error: ErrorDetails) -> ValidationException:
    ctx = error.get("ctx") or {}
    error_type = error["type"]
    value = error.get("input")

    if error_type in API_ERROR_CODES:
        param = param_name(error["loc"], ctx.get("param"))
        message = error["msg"]
        if error_type == "parameter_missing" and ctx.get("param"):
            message = f"Missing required param: {param}."
        return ValidationException(message, code=error_type, param=param)

    param = param_name(error["loc"])
    if error_type == "missing" or value is None:
        return ValidationException(
            f"Missing required param: {param}.", code="parameter_missing", param=param
        )
    if error_type in _INTEGER_ERRORS:
        return ValidationException(
            f"Invalid integer: {value}", code="parameter_invalid_integer", param=param
        )
    if error_type == "bool_parsing":
        return ValidationException(f"Invalid boolean: {value}", param=param)
    if error_type == "float_parsing":
        return ValidationException(f"Invalid decimal: {value}", param=param)
    if error_type == "literal_error":
        return ValidationException(
            f"Invalid {param}: must be one of {ctx.get('expected')}", param=param
        )
    return ValidationException(f"Invalid {param}: {error['msg']}", param=param)


def parse_params(
    model: type[ModelT], params: Any, context: dict[str, Any] | None = None
) -> ModelT:
    """
    Validate decoded request params against ``model``.

    Args:
        model: The param schema.
        params: Decoded params (see ``paysim.core.dependencies.get_params``).
        context: Optional validation context, e.g. ``{"max_limit": 100}``.

    Raises:
        ValidationException: For the first invalid or missing param, keeping
            its bracket-notation name in ``param``.
    """
    try:
        return model.model_validate(params, context=context)
    except ValidationError as e:
        raise to_validation_exception(e.errors()[0]) from e


__all__ = [
    "SUPPORTED_CURRENCIES",
    "coerce_list",
    "FormInt",
    "PositiveInt",
    "NonNegativeInt",
    "Currency",
    "FormList",
    "Metadata",
    "missing_param",
    "ParamsModel",
    "ListParams",
    "param_name",
    "to_validation_exception",
    "parse_params",
]
