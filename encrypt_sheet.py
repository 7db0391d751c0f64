#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Encrypt plaintext guest / event sheets into the form that gets published.

Guest sheet: Codigo, Nombre, Invitados and Eventos are encrypted with the
row's own code, so only that code can unlock them.
Event sheet: every event column is encrypted with the event key (the
plaintext that guests find in their Eventos cell).
"""
import csv
import sys

import xxtea
from invitation import read_table, EVENT_COLUMNS

GUEST_ENCRYPTED_COLUMNS = ('Codigo', 'Nombre', 'Invitados', 'Eventos')


def encrypt_guest_rows(rows: list) -> list:
    """Encrypt the private columns of each guest row with that row's code."""
    encrypted = []
    for row in rows:
        row = dict(row)
        code = (row.get('Codigo') or '').strip()
        if code:
            for column in GUEST_ENCRYPTED_COLUMNS:
                if row.get(column):
                    row[column] = xxtea.encrypt_to_base64(row[column], code)
        encrypted.append(row)
    return encrypted


def encrypt_event_rows(rows: list, event_key: str) -> list:
    """Encrypt every event column with the shared event key."""
    if not event_key:
        raise ValueError('event key must not be empty')
    encrypted = []
    for row in rows:
        row = dict(row)
        for column in EVENT_COLUMNS:
            if row.get(column):
                row[column] = xxtea.encrypt_to_base64(row[column], event_key)
        encrypted.append(row)
    return encrypted


def write_table(path: str, headers: list, rows: list):
    with open(path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=headers, extrasaction='ignore')
        writer.writeheader()
        for row in rows:
            writer.writerow({h: (row.get(h) or '') for h in headers})


def main(argv=None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description='Encrypt a plaintext guest or event sheet for publishing')
    parser.add_argument('kind', choices=('guests', 'events'),
                        help='Which sheet the input file is')
    parser.add_argument('input', help='Plaintext CSV file')
    parser.add_argument('output', help='Where to write the encrypted CSV')
    parser.add_argument('--event-key', type=str, default=None,
                        help='Event key (required for the events sheet)')

    args = parser.parse_args(argv)

    if args.kind == 'events' and not args.event_key:
        print("ERROR: --event-key is required when encrypting the events sheet")
        return 2

    try:
        with open(args.input, 'r', encoding='utf-8') as f:
            headers, rows = read_table(f.read())
    except OSError as e:
        print(f"ERROR: Cannot read {args.input}: {e}")
        return 1

    if args.kind == 'guests':
        rows = encrypt_guest_rows(rows)
    else:
        rows = encrypt_event_rows(rows, args.event_key)

    write_table(args.output, headers, rows)
    print(f"✅ Encrypted {len(rows)} {args.kind} row(s) -> {args.output}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
