#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Backend API Server for Personalised Wedding Invitations
Looks guests up by invitation code in the published (encrypted) sheets
"""
from flask import Flask, request, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
import os
import traceback

import xxtea
from invitation import build_invitation, SheetFormatError
import sheet_client
from sheet_client import SheetFetchError

# Load environment variables from .env file if it exists
load_dotenv()

app = Flask(__name__)
CORS(app)  # The invitation page is served from a static host

# Debug mode - set via environment variable
DEBUG_MODE = os.environ.get('DEBUG', 'false').lower() == 'true'

MAX_BATCH_SIZE = 100


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


@app.route('/api/invitation', methods=['GET'])
def get_invitation():
    """
    Personalised invitation for the code in ?i=

    Response (no match, or no code):
        {"found": false, "sections": ["portada", "no-code"]}

    Response (match): see invitation.build_invitation
    """
    code = request.args.get('i', '')

    try:
        guest_csv, event_csv = sheet_client.fetch_sheets()
    except SheetFetchError as e:
        print(f"⚠️  {e}")
        return jsonify({'error': str(e), 'message': 'connection-error',
                        'sections': ['portada', 'no-code']}), 502

    try:
        invitation = build_invitation(code, guest_csv, event_csv)
    except SheetFormatError as e:
        print(f"Error processing guest data: {e}")
        return jsonify({'error': str(e), 'message': 'data-error',
                        'sections': ['portada', 'no-code']}), 500
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e), 'type': type(e).__name__}), 500

    if DEBUG_MODE:
        print(f"DEBUG: Invitation lookup found={invitation['found']} sections={invitation['sections']}")

    return jsonify(invitation)


@app.route('/api/encrypt', methods=['POST'])
def encrypt_text():
    """
    Encrypt one cell value.

    Request body:
        {"text": "Familia Pérez", "key": "ABC123"}

    Response:
        {"encrypted": "<base64>"}
    """
    try:
        data = _json_body()
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        text = data.get('text')
        key = data.get('key')

        if not isinstance(text, str):
            return jsonify({'error': 'No text provided'}), 400
        if not isinstance(key, str) or not key:
            return jsonify({'error': 'key must be a non-empty string'}), 400

        return jsonify({'encrypted': xxtea.encrypt_to_base64(text, key)})

    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e), 'type': type(e).__name__}), 500


@app.route('/api/encrypt/batch', methods=['POST'])
def encrypt_batch():
    """
    Encrypt several cell values with the same key (e.g. a whole guest row).

    Request body:
        {"texts": ["ABC123", "Familia Pérez", "Ana, Luis"], "key": "ABC123"}

    Response:
        {"encrypted": ["<base64>", ...]}
    """
    try:
        data = _json_body()
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        texts = data.get('texts', [])
        key = data.get('key')

        if not texts or not isinstance(texts, list):
            return jsonify({'error': 'No texts array provided'}), 400
        if not isinstance(key, str) or not key:
            return jsonify({'error': 'key must be a non-empty string'}), 400
        if len(texts) > MAX_BATCH_SIZE:
            return jsonify({'error': f'Batch size too large (max {MAX_BATCH_SIZE})'}), 400

        encrypted = [xxtea.encrypt_to_base64(text, key) if isinstance(text, str) else ''
                     for text in texts]
        return jsonify({'encrypted': encrypted})

    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e), 'type': type(e).__name__}), 500


@app.route('/api/decrypt', methods=['POST'])
def decrypt_text():
    """
    Decrypt one cell value.

    Request body:
        {"encrypted": "<base64>", "key": "ABC123"}

    Response:
        {"decrypted": "Familia Pérez"}   (null when the key is wrong or the data is damaged)
    """
    try:
        data = _json_body()
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        encrypted = data.get('encrypted')
        key = data.get('key')

        if not isinstance(encrypted, str) or not encrypted:
            return jsonify({'error': 'No encrypted text provided'}), 400
        if not isinstance(key, str) or not key:
            return jsonify({'error': 'key must be a non-empty string'}), 400

        return jsonify({'decrypted': xxtea.decrypt_from_base64(encrypted, key)})

    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e), 'type': type(e).__name__}), 500


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'wedding-invitation-api'
    })


@app.route('/api', methods=['GET'])
def api_info():
    """API information endpoint"""
    return jsonify({
        'service': 'wedding-invitation-api',
        'status': 'running',
        'endpoints': {
            'invitation': '/api/invitation?i=CODE (GET)',
            'encrypt': '/api/encrypt (POST)',
            'batch': '/api/encrypt/batch (POST)',
            'decrypt': '/api/decrypt (POST)',
            'health': '/api/health (GET)'
        }
    })


if __name__ == '__main__':
    # Default to 5001 to avoid macOS AirPlay Receiver conflict on port 5000
    port = int(os.environ.get('PORT', 5001))
    host = os.environ.get('HOST', '0.0.0.0')

    print(f"Starting Wedding Invitation API on {host}:{port}")
    print(f"Debug mode: {DEBUG_MODE}")
    print(f"Guest sheet: {sheet_client.GUEST_SHEET_URL}")
    print(f"API endpoint: http://{host}:{port}/api/invitation?i=CODE")

    app.run(host=host, port=port, debug=DEBUG_MODE)
