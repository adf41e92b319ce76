"""
Utilidades para el manejo de horas de reloj, fechas y zonas horarias.
"""
from datetime import date, datetime, time, timezone
import re

from dateutil import parser as date_parser
import pytz

# HH:MM en 24 horas; admite la hora sin cero a la izquierda ("9:00")
CLOCK_TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_clock_time(value: str) -> time:
    """
    Convierte una hora "HH:MM" (24 horas) en un objeto time.

    Raises:
        ValueError: si el formato no es válido
    """
    match = CLOCK_TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Hora inválida: {value!r}")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def normalize_clock_time(value: str) -> str:
    """Devuelve la hora con relleno de ceros ("9:00" -> "09:00")."""
    return parse_clock_time(value).strftime("%H:%M")


def format_clock_time(value: str) -> str:
    """Formatea "14:00" como "2:00 PM"."""
    parsed = parse_clock_time(value)
    period = "PM" if parsed.hour >= 12 else "AM"
    display_hours = parsed.hour % 12 or 12
    return f"{display_hours}:{parsed.minute:02d} {period}"


def parse_calendar_date(value) -> date:
    """
    Obtiene la fecha de calendario de un valor de entrada.

    Acepta objetos date/datetime y cualquier cadena que dateutil reconozca
    como fecha ("2025-07-01", "2025-07-01T10:00:00Z", "07/01/2025",
    "July 1, 2025"). Solo año, mes y día son significativos.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date_parser.parse(value.strip()).date()
        except (ValueError, OverflowError):
            pass
    raise ValueError(f"Fecha inválida: {value!r}")


def get_current_time_in_gym_timezone(gym_timezone: str) -> datetime:
    """
    Obtiene la hora actual en la zona horaria del gimnasio.

    Returns:
        Datetime aware representando la hora actual en la zona horaria del gimnasio
    """
    utc_now = datetime.now(timezone.utc)
    tz = pytz.timezone(gym_timezone)
    return utc_now.astimezone(tz)


def get_today_in_gym_timezone(gym_timezone: str) -> date:
    return get_current_time_in_gym_timezone(gym_timezone).date()


def combine_in_gym_timezone(day: date, clock_time: str, gym_timezone: str) -> datetime:
    """
    Construye el instante de inicio de una clase: la fecha a la hora indicada,
    interpretada como hora local del gimnasio.

    Returns:
        Datetime aware en la zona horaria del gimnasio
    """
    naive_dt = datetime.combine(day, parse_clock_time(clock_time))
    tz = pytz.timezone(gym_timezone)
    return tz.localize(naive_dt)
