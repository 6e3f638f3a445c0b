import typing
from dataclasses import dataclass, field

from urenstaat.common import DayHours, WeekKey


@dataclass
class Template:
    project: str
    hours: DayHours = field(default_factory=DayHours)
    id: typing.Optional[int] = None


@dataclass
class Entry:
    week: str
    project: str
    hours: DayHours = field(default_factory=DayHours)
    id: typing.Optional[int] = None

    @property
    def week_key(self) -> WeekKey:
        return WeekKey.parse(self.week)


class WeekRow(typing.NamedTuple):
    week: str
    project: str
    hours: DayHours


@dataclass(frozen=True)
class EmployeeInfo:
    name: str = 'John Doe'
    title: str = 'Enterprise Architect'
    phone: str = '000000000'
