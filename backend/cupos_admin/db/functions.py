"""Dialect-aware SQL expressions shared by the slot queries."""

from sqlalchemy import String, literal
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement
from sqlalchemy.types import Time


class time_of_day(FunctionElement):
    """``TIME(x)``: time-of-day of a zero-padded ``HH:MM[:SS]`` value."""

    type = Time()
    name = "time_of_day"
    inherit_cache = True


class slot_time(time_of_day):
    """Time-of-day of a stored hour column; also accepts unpadded ``"8:30"``."""

    name = "slot_time"
    inherit_cache = True


@compiles(time_of_day)
def _time_default(element, compiler, **kw):
    return "CAST(%s AS TIME)" % compiler.process(element.clauses, **kw)


@compiles(time_of_day, "mysql")
@compiles(time_of_day, "mariadb")
def _time_mysql(element, compiler, **kw):
    return "TIME(%s)" % compiler.process(element.clauses, **kw)


@compiles(time_of_day, "sqlite")
def _time_sqlite(element, compiler, **kw):
    return "time(%s)" % compiler.process(element.clauses, **kw)


@compiles(slot_time, "sqlite")
def _slot_time_sqlite(element, compiler, **kw):
    # sqlite's time() rejects a one-digit hour
    arg = compiler.process(element.clauses, **kw)
    return "time(CASE WHEN instr(%s, ':') = 2 THEN '0' || %s ELSE %s END)" % (arg, arg, arg)


def hour_bound(value: str) -> time_of_day:
    return time_of_day(literal(value, String()))
