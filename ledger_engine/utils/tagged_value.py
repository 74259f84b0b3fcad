"""
Ledger Engine - Tagged Metadata Values

Free-form metadata (journal entry annotations, expense attributes, cash
denomination maps) is stored as an explicit tagged value instead of an
untyped JSON blob. Every node carries a `kind` tag, so numbers keep their
exact decimal value and booleans never collapse into integers on the way
through the database.
"""

from decimal import Decimal
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter
from sqlalchemy import JSON
from sqlalchemy.types import TypeDecorator


class StringValue(BaseModel):
    kind: Literal["string"] = "string"
    value: str


class NumberValue(BaseModel):
    kind: Literal["number"] = "number"
    value: Decimal


class BoolValue(BaseModel):
    kind: Literal["bool"] = "bool"
    value: bool


class MapValue(BaseModel):
    kind: Literal["map"] = "map"
    value: Dict[str, "TaggedValue"] = Field(default_factory=dict)


TaggedValue = Annotated[
    Union[StringValue, NumberValue, BoolValue, MapValue],
    Field(discriminator="kind"),
]

MapValue.model_rebuild()

tagged_value_adapter: TypeAdapter = TypeAdapter(TaggedValue)


def from_python(value: Any) -> Union[StringValue, NumberValue, BoolValue, MapValue]:
    """
    Build a tagged value from plain Python data.
    
    Accepts str, bool, int, float, Decimal and dicts of those (nested).
    Anything else is rejected rather than silently stringified.
    """
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return BoolValue(value=value)
    if isinstance(value, str):
        return StringValue(value=value)
    if isinstance(value, float):
        return NumberValue(value=Decimal(str(value)))
    if isinstance(value, (int, Decimal)):
        return NumberValue(value=Decimal(value))
    if isinstance(value, dict):
        return MapValue(value={str(key): from_python(item) for key, item in value.items()})
    if isinstance(value, (StringValue, NumberValue, BoolValue, MapValue)):
        return value
    raise TypeError(f"Unsupported metadata value type: {type(value).__name__}")


def to_python(value: Union[StringValue, NumberValue, BoolValue, MapValue]) -> Any:
    """Unwrap a tagged value into plain Python data."""
    if isinstance(value, MapValue):
        return {key: to_python(item) for key, item in value.value.items()}
    return value.value


def dump_tagged(value: Union[StringValue, NumberValue, BoolValue, MapValue]) -> Dict[str, Any]:
    """Serialize to JSON-safe data. Decimals are written as strings."""
    return tagged_value_adapter.dump_python(value, mode="json")


def load_tagged(data: Dict[str, Any]) -> Union[StringValue, NumberValue, BoolValue, MapValue]:
    return tagged_value_adapter.validate_python(data)


class TaggedValueType(TypeDecorator):
    """SQLAlchemy column type persisting a TaggedValue as JSON."""
    
    impl = JSON
    cache_ok = True
    
    def process_bind_param(self, value: Optional[Any], dialect) -> Optional[Dict[str, Any]]:
        if value is None:
            return None
        return dump_tagged(from_python(value))
    
    def process_result_value(self, value: Optional[Dict[str, Any]], dialect):
        if value is None:
            return None
        return load_tagged(value)
