from .manager import Manager
from .perimeter import PerimeterConfig, PerimeterRead, PerimeterUpdate
from .shift import ClockInRequest, ClockOutRequest, Shift, ShiftRead, ShiftState
