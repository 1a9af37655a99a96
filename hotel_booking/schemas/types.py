from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from hotel_booking.core.clock import as_utc

# SQLite returns naive values; everything leaving the API is UTC-aware
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
