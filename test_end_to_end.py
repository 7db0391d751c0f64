#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
End-to-end test: plaintext sheets -> encryption tool -> published CSV ->
API lookup by invitation code.
"""

import sys
import os
from unittest import mock

# Add current directory to path
sys.path.insert(0, os.path.dirname(__file__))

from encrypt_sheet import encrypt_guest_rows, encrypt_event_rows
from invite_api import app
from invitation import read_table

EVENT_KEY = 'clave-eventos-2025'

PLAIN_GUESTS = """Codigo,Nombre,Invitados,Cantidad,Discurso,Recepcion,Video,Civil,Eventos,Confirmado
ABC123,Familia Pérez,"Ana, Luis, Sofía",3,si,si,si,si,clave-eventos-2025,
QWE456,Tía Marta,Marta,1,si,no,si,no,clave-eventos-2025,No
"""

PLAIN_EVENTS = """Evento,Lugar,Fecha,Direccion,Mapa
civil,Registro Civil N° 5,2025-11-19T10:00,Av. Siempreviva 742,https://maps.example/civil
discurso,Salón del Reino,2025-11-22 18:00,Belgrano 1500,https://maps.example/discurso
recepcion,Quinta Los Álamos,22/11/2025 21:00,Ruta 8 km 50,https://maps.example/quinta
video,,,https://video.example/live,
"""


def to_csv(headers, rows):
    lines = [','.join(headers)]
    for row in rows:
        lines.append(','.join(row.get(h) or '' for h in headers))
    return '\n'.join(lines) + '\n'


def published_sheets():
    guest_headers, guest_rows = read_table(PLAIN_GUESTS)
    event_headers, event_rows = read_table(PLAIN_EVENTS)
    return (to_csv(guest_headers, encrypt_guest_rows(guest_rows)),
            to_csv(event_headers, encrypt_event_rows(event_rows, EVENT_KEY)))


def lookup(code):
    app.config['TESTING'] = True
    with mock.patch('sheet_client.fetch_sheets', return_value=published_sheets()):
        return app.test_client().get('/api/invitation', query_string={'i': code} if code else None).get_json()


def test_published_sheets_hide_private_values():
    guest_csv, event_csv = published_sheets()
    for secret in ('ABC123', 'Familia Pérez', 'Sofía', EVENT_KEY):
        assert secret not in guest_csv
    for secret in ('Registro Civil', 'Quinta Los Álamos', 'video.example'):
        assert secret not in event_csv
    # Flags and counts stay readable
    assert ',3,si,si,si,si,' in guest_csv


def test_end_to_end_full_guest():
    data = lookup('ABC123')

    assert data['found'] is True
    assert data['group_name'] == 'Familia Pérez'
    assert data['guest_names'] == 'Ana, Luis y Sofía'
    assert data['guest_count'] == 3
    assert data['event_names'] == 'ceremonia civil, discurso de bodas y recepción de bodas'
    assert data['sections'] == ['portada', 'invitacion', 'civil', 'discurso', 'fiesta', 'contratapa']
    assert data['events']['civil']['fecha'] == 'miércoles, 19 de noviembre de 2025'
    assert data['events']['discurso']['hora'] == '18:00'
    assert data['events']['discurso']['video_url'] == 'https://video.example/live'
    assert data['events']['fiesta']['fecha'] == 'sábado, 22 de noviembre de 2025'
    assert data['rsvp'] == 'pending'


def test_end_to_end_partial_guest():
    data = lookup('QWE456')

    assert data['group_name'] == 'Tía Marta'
    assert data['sections'] == ['portada', 'invitacion', 'discurso', 'contratapa']
    assert data['visible']['rsvp'] is False
    assert data['rsvp'] == 'declined'


def test_end_to_end_unknown_codes():
    for code in ('abc123', 'ABC12', 'ABC1234', 'WRONG1', None):
        assert lookup(code) == {'found': False, 'sections': ['portada', 'no-code']}


if __name__ == '__main__':
    tests = [(name, fn) for name, fn in sorted(globals().items())
             if name.startswith('test_') and callable(fn)]
    failed = 0
    print("=" * 70)
    print("END-TO-END TEST: Encrypted sheets + invitation lookup")
    print("=" * 70)
    for name, fn in tests:
        try:
            fn()
            print(f"✅ {name}")
        except AssertionError as e:
            failed += 1
            print(f"❌ {name}: {e}")
    print("=" * 70)
    print("✅ ALL END-TO-END TESTS PASSED!" if not failed else f"❌ {failed} TEST(S) FAILED!")
    sys.exit(0 if not failed else 1)
