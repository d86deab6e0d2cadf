from .reading import Reading
from .decoder import decode_manufacturer_data, reading_from_advertisement
from .history import HistoryPoint, HistoryBuffer, MAX_HISTORY_POINTS

__all__ = ["Reading",
           "decode_manufacturer_data",
           "reading_from_advertisement",
           "HistoryPoint",
           "HistoryBuffer",
           "MAX_HISTORY_POINTS"]
