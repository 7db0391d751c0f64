#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Download the published guest and event sheets (CSV export).
Retries transient failures and busts caches with a timestamp parameter.
"""
import os
import time
from concurrent.futures import ThreadPoolExecutor

import requests
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

PUBLISHED_SHEET = 'https://docs.google.com/spreadsheets/d/e/2PACX-1vQcjtPM-3LNZFamySSe9rbVOjTu1pRSQ0Te5ILx6MmF9ClbBJUZvnfPHYsIg4_CclD_7ba0lv1QMdiZ/pub'

GUEST_SHEET_URL = os.environ.get('GUEST_SHEET_URL', f'{PUBLISHED_SHEET}?output=csv')
EVENT_SHEET_URL = os.environ.get('EVENT_SHEET_URL', f'{PUBLISHED_SHEET}?output=csv&gid=1404690345')
FETCH_RETRIES = int(os.environ.get('FETCH_RETRIES', '3'))
FETCH_TIMEOUT = float(os.environ.get('FETCH_TIMEOUT', '10'))

DEBUG_MODE = os.environ.get('DEBUG', 'false').lower() == 'true'


class SheetFetchError(RuntimeError):
    """The sheet could not be downloaded after every retry."""


def fetch_with_retry(url: str, retries: int = None, timeout: float = None) -> str:
    """
    GET a published sheet and return its text.

    Each attempt adds `_=<epoch ms>` so intermediate caches never serve a
    stale copy. Raises SheetFetchError once all attempts have failed.
    """
    retries = FETCH_RETRIES if retries is None else retries
    timeout = FETCH_TIMEOUT if timeout is None else timeout

    for attempt in range(1, retries + 1):
        try:
            if DEBUG_MODE:
                print(f"DEBUG: Fetching {url} (attempt {attempt})")
            response = requests.get(url, params={'_': int(time.time() * 1000)}, timeout=timeout)
            if response.ok:
                return response.text
            print(f"⚠️  Fetch attempt {attempt} failed with status: {response.status_code}")
        except requests.exceptions.RequestException as e:
            print(f"⚠️  Fetch attempt {attempt} failed with error: {e}")

    raise SheetFetchError(f'Failed to fetch {url} after {retries} attempts.')


def fetch_sheets(guest_url: str = None, event_url: str = None):
    """Fetch the guest and event sheets concurrently. Returns (guest_csv, event_csv)."""
    guest_url = guest_url or GUEST_SHEET_URL
    event_url = event_url or EVENT_SHEET_URL

    with ThreadPoolExecutor(max_workers=2) as pool:
        guest_future = pool.submit(fetch_with_retry, guest_url)
        event_future = pool.submit(fetch_with_retry, event_url)
        return guest_future.result(), event_future.result()
