#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Guest matching and invitation building.

Guest and event data come from two published spreadsheets (CSV). Sensitive
cells are XXTEA-encrypted and Base64-encoded:
1. The guest row is found by decrypting each Codigo cell with the code the
   guest supplied; the row matches when the result equals that code.
2. Nombre, Invitados and Eventos of the matched row decrypt with the same code.
3. The decrypted Eventos value is the key for every cell of the event table.
"""
import csv
import io
import re
from datetime import datetime

import xxtea

GUEST_COLUMNS = ('Codigo', 'Nombre', 'Invitados', 'Cantidad', 'Discurso',
                 'Recepcion', 'Video', 'Civil', 'Eventos')
EVENT_COLUMNS = ('Evento', 'Lugar', 'Fecha', 'Direccion', 'Mapa')

# Event names as stored in the sheet -> page section names
SECTION_NAMES = {'recepcion': 'fiesta'}

EVENT_LABELS = (
    ('civil', 'ceremonia civil'),
    ('discurso', 'discurso de bodas'),
    ('fiesta', 'recepción de bodas'),
)

WEEKDAYS = ('lunes', 'martes', 'miércoles', 'jueves', 'viernes', 'sábado', 'domingo')
MONTHS = ('enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio', 'julio',
          'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre')
DATE_FORMATS = ('%Y-%m-%d %H:%M', '%Y-%m-%d %H:%M:%S', '%d/%m/%Y %H:%M', '%d/%m/%Y %H:%M:%S', '%d/%m/%Y')
LEADING_NUMBER = re.compile(r"\s*(\d+)")


class SheetFormatError(ValueError):
    """A published sheet is missing a column the page depends on."""


def read_table(csv_text: str):
    """Return (headers, rows) where each row is a dict keyed by header."""
    lines = [line for line in csv_text.splitlines() if line.strip()]
    if not lines:
        return [], []

    reader = csv.reader(io.StringIO('\n'.join(lines)))
    headers = [h.strip() for h in next(reader)]
    rows = []
    for values in reader:
        values = [v.strip() for v in values]
        rows.append({header: (values[i] if i < len(values) else None)
                     for i, header in enumerate(headers)})
    return headers, rows


def parse_csv(csv_text: str) -> list:
    return read_table(csv_text)[1]


def parse_guest_table(csv_text: str) -> list:
    """Parse the guest sheet, checking every required column is present."""
    headers, rows = read_table(csv_text)
    for column in GUEST_COLUMNS:
        if column not in headers:
            raise SheetFormatError(f'Column "{column}" not found.')
    return rows


def decrypt_field(data, key: str):
    """
    Decrypt one cell, or None if it is empty or does not decrypt.
    Spaces are turned back into '+' (URL and copy-paste damage).
    """
    if not isinstance(data, str) or not data:
        return None
    sanitized = data.strip().replace(' ', '+')
    return xxtea.decrypt_from_base64(sanitized, key)


def find_guest(rows: list, code):
    """
    Return the first row whose Codigo decrypts to code, with Codigo, Nombre
    and Invitados replaced by their plaintext. None if nothing matches.
    """
    if not code:
        return None

    for row in rows:
        if decrypt_field(row.get('Codigo'), code) == code:
            guest = dict(row)
            guest['Codigo'] = code
            guest['Nombre'] = decrypt_field(row.get('Nombre'), code)
            guest['Invitados'] = decrypt_field(row.get('Invitados'), code)
            return guest
    return None


def join_names(names: list) -> str:
    """'A', 'A y B', 'A, B y C'"""
    if not names:
        return ''
    if len(names) == 1:
        return names[0]
    return ', '.join(names[:-1]) + ' y ' + names[-1]


def split_guests(invitados) -> list:
    return [name.strip() for name in (invitados or '').split(',') if name.strip()]


def guest_count(cantidad) -> int:
    """Leading number of the Cantidad cell ("2 personas" -> 2), 0 if there is none."""
    match = LEADING_NUMBER.match(str(cantidad)) if cantidad is not None else None
    return int(match.group(1)) if match else 0


def _is_yes(value) -> bool:
    return isinstance(value, str) and value.lower() == 'si'


def visible_sections(guest: dict) -> dict:
    """Which page sections this guest gets to see."""
    reception = _is_yes(guest.get('Recepcion'))
    return {
        'invitacion': True,
        'civil': _is_yes(guest.get('Civil')),
        'civil-recepcion': _is_yes(guest.get('Civil')),
        'discurso': _is_yes(guest.get('Discurso')),
        'fiesta': reception,
        'video': _is_yes(guest.get('Video')),
        'rsvp': reception,
        'contratapa': True,
    }


def rsvp_status(confirmado) -> str:
    if confirmado == 'Si':
        return 'confirmed'
    if confirmado == 'No':
        return 'declined'
    return 'pending'


def parse_event_date(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
    return None


def format_event_date(value):
    """
    Format a decrypted Fecha cell the way the page shows it:
    ('miércoles, 19 de noviembre de 2025', '10:00'). Empty strings if unparseable.
    """
    moment = parse_event_date(value)
    if moment is None:
        return '', ''
    fecha = f'{WEEKDAYS[moment.weekday()]}, {moment.day} de {MONTHS[moment.month - 1]} de {moment.year}'
    hora = f'{moment.hour:02d}:{moment.minute:02d}'
    return fecha, hora


def _event_field(event: dict, column: str, event_key: str, warnings: list):
    cell = event.get(column)
    if isinstance(cell, str) and cell.strip() and not xxtea.is_base64(cell.strip().replace(' ', '+')):
        message = f'Malformed Base64 in event column "{column}"'
        print(f"⚠️  {message}: {cell[:40]!r}")
        warnings.append(message)
        return None
    return decrypt_field(cell, event_key)


def populate_event(event: dict, event_key: str, warnings: list) -> dict:
    """Decrypt date, place, address and map link of one event row."""
    fecha, hora = format_event_date(_event_field(event, 'Fecha', event_key, warnings) or '')
    return {
        'fecha': fecha,
        'hora': hora,
        'lugar': _event_field(event, 'Lugar', event_key, warnings),
        'direccion': _event_field(event, 'Direccion', event_key, warnings),
        'mapa': _event_field(event, 'Mapa', event_key, warnings),
    }


def load_event_details(event_key: str, visible: dict, event_rows: list, warnings: list = None) -> dict:
    """
    Decrypt the event table with the guest's event key.

    Returns {'events': {section: details}, 'order': [...], 'video_url': ...}.
    'video' rows only provide the video link for the discurso section and
    'civil-recepcion' is nested inside the civil section.
    """
    if warnings is None:
        warnings = []
    events = {}
    order = []

    named = [(_event_field(event, 'Evento', event_key, warnings), event) for event in event_rows]

    video_url = None
    for name, event in named:
        if name == 'video':
            video_url = _event_field(event, 'Direccion', event_key, warnings)
            break

    nested = None
    for name, event in named:
        if not name or name == 'video':
            continue

        if name == 'civil-recepcion':
            if visible.get(name):
                nested = populate_event(event, event_key, warnings)
            continue

        section = SECTION_NAMES.get(name, name)
        if not visible.get(section):
            continue

        details = populate_event(event, event_key, warnings)
        if section == 'discurso':
            details['video_url'] = video_url
        events[section] = details
        order.append(section)

    if nested is not None and 'civil' in events:
        events['civil']['recepcion'] = nested

    return {'events': events, 'order': order, 'video_url': video_url}


def build_invitation(code, guest_csv: str, event_csv: str) -> dict:
    """
    Build the personalised invitation for a guest code.

    A missing code and a wrong code give the same answer: only the cover and
    the 'no-code' message.
    """
    guest = find_guest(parse_guest_table(guest_csv), code)
    if guest is None:
        return {'found': False, 'sections': ['portada', 'no-code']}

    visible = visible_sections(guest)
    guests = split_guests(guest.get('Invitados'))
    events_shown = [label for section, label in EVENT_LABELS if visible[section]]
    warnings = []

    details = {'events': {}, 'order': [], 'video_url': None}
    event_key = decrypt_field(guest.get('Eventos'), code)
    if event_key:
        details = load_event_details(event_key, visible, parse_csv(event_csv or ''), warnings)

    return {
        'found': True,
        'code': code,
        'group_name': guest.get('Nombre'),
        'guests': guests,
        'guest_names': join_names(guests),
        'guest_count': guest_count(guest.get('Cantidad')),
        'visible': visible,
        'event_list': events_shown,
        'event_names': join_names(events_shown),
        'rsvp': rsvp_status(guest.get('Confirmado')),
        'events': details['events'],
        'video_url': details['video_url'],
        'sections': ['portada', 'invitacion'] + details['order'] + ['contratapa'],
        'warnings': warnings,
    }
