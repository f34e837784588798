from pydantic import BeforeValidator, Field
from typing import Annotated, Any, Optional

# SQLite / PostgreSQL の INTEGER 上限
MAX_ID = 2**63 - 1


def blank_to_none(v: Any) -> Any:
    # フォームの空欄は「未記録」(None)。0 とは区別する
    if isinstance(v, str) and not v.strip():
        return None
    return v


def strip_text(v: Any) -> Any:
    if isinstance(v, str):
        return v.strip()
    return v


RecordId = Annotated[int, Field(ge=1, le=MAX_ID)]
Count = Annotated[Optional[Annotated[int, Field(ge=0, le=MAX_ID)]], BeforeValidator(blank_to_none)]
Amount = Annotated[Optional[float], BeforeValidator(blank_to_none)]
OptionalText = Annotated[Optional[str], BeforeValidator(blank_to_none)]
Text = Annotated[str, BeforeValidator(strip_text)]
