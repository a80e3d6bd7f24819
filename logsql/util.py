import datetime as dt
from typing import Any, cast

import rapidjson


def from_json(obj: str) -> Any:
    return rapidjson.loads(obj, datetime_mode=rapidjson.DM_ISO8601, uuid_mode=rapidjson.UM_CANONICAL)


def now_in_utc() -> dt.datetime:
    return dt.datetime.now(tz=dt.timezone.utc)


def to_json(obj: Any) -> str:
    return cast(str, rapidjson.dumps(obj, datetime_mode=rapidjson.DM_ISO8601, uuid_mode=rapidjson.UM_CANONICAL))
