"""
Shared enumerations for the stock tracker.
"""

import enum


class Market(str, enum.Enum):
    """Market an instrument trades on.

    DOMESTIC instruments carry a Korean exchange suffix (.KS/.KQ) and are
    priced in KRW; everything else is FOREIGN and priced in USD.
    """

    DOMESTIC = "domestic"
    FOREIGN = "foreign"
