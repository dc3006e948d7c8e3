"""Email templates."""

import html
from typing import Tuple

_BRAND_COLOR = "#2D6A6A"


def otp_email(code: str, property_name: str, ttl_minutes: int) -> Tuple[str, str, str]:
    """
    Render the login code email.

    Args:
        code: Six-digit login code
        property_name: Property shown as sender and heading
        ttl_minutes: Minutes until the code expires

    Returns:
        Tuple of (subject, html body, plain-text body)
    """
    name = html.escape(property_name)
    subject = f"Your Login Code - {property_name}"
    html_body = f"""
        <div style="font-family: Arial, sans-serif; max-width: 400px; margin: 0 auto; padding: 20px;">
            <h2 style="color: {_BRAND_COLOR};">{name}</h2>
            <p>Your login code is:</p>
            <div style="font-size: 32px; font-weight: bold; color: {_BRAND_COLOR}; letter-spacing: 5px; padding: 20px; background: #f0f9f9; border-radius: 8px; text-align: center;">
                {html.escape(code)}
            </div>
            <p style="color: #666; margin-top: 20px;">This code expires in {ttl_minutes} minutes.</p>
        </div>
    """
    text_body = (
        f"{property_name}\n\n"
        f"Your login code is: {code}\n\n"
        f"This code expires in {ttl_minutes} minutes."
    )
    return subject, html_body, text_body
