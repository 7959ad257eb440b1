"""
Notifications Module - Telegram notifications for the site owner
"""

import threading

import requests
from flask import current_app


TELEGRAM_API_URL = 'https://api.telegram.org/bot{token}/sendMessage'


def get_admin_notifications_config():
    """Load admin notification settings from the app configuration"""
    return {
        'telegram': {
            'bot_token': current_app.config.get('ADMIN_TELEGRAM_BOT_TOKEN') or '',
            'chat_id': current_app.config.get('ADMIN_TELEGRAM_CHAT_ID') or ''
        }
    }


def _post_telegram(logger, url, payload):
    try:
        response = requests.post(url, json=payload, timeout=10)
        if response.status_code != 200:
            logger.error(f"Telegram API error: {response.status_code}")
    except requests.RequestException as e:
        logger.error(f"Admin Telegram Error: {str(e)}")


def send_admin_notification(subject, message_text):
    """
    Send a notification to the site owner via Telegram

    The request runs in a daemon thread so a slow or failing Bot API never
    delays the response that triggered it.

    Args:
        subject (str): Notification subject
        message_text (str): Notification message

    Returns:
        bool: True if a message was dispatched, False when not configured
    """
    config = get_admin_notifications_config()['telegram']
    if not (config['bot_token'] and config['chat_id']):
        current_app.logger.debug("Admin Telegram credentials not configured")
        return False

    url = TELEGRAM_API_URL.format(token=config['bot_token'])
    payload = {
        'chat_id': config['chat_id'],
        'text': f"💼 <b>[Portfolio]</b>\n📌 <b>{subject}</b>\n\n{message_text}",
        'parse_mode': 'HTML'
    }
    thread = threading.Thread(target=_post_telegram, args=(current_app.logger, url, payload))
    thread.daemon = True
    thread.start()
    current_app.logger.info("Admin Telegram notification sent")
    return True


__all__ = [
    'send_admin_notification'
]
