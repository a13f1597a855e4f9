"""HTML bodies for client emails"""
from datetime import date, datetime
from html import escape

THEME = {
    "background": "#0a0a0a",
    "card": "#1a1a1a",
    "panel": "#252525",
    "accent": "#d4a853",
    "text": "#e0e0e0",
    "muted": "#888",
}


def format_long_date(value: date) -> str:
    """e.g. Monday, March 2, 2026"""
    return f"{value.strftime('%A, %B')} {value.day}, {value.year}"


def _detail_row(label: str, value: str, highlight: bool = False) -> str:
    color = THEME["accent"] if highlight else "#fff"
    return f"""
        <tr>
          <td style="padding: 8px 0;">
            <span style="color: {THEME['muted']}; font-size: 14px;">{label}</span><br>
            <span style="color: {color}; font-size: 16px; font-weight: 600;">{escape(value)}</span>
          </td>
        </tr>"""


def _layout(heading: str, intro: str, details: str, footer_note: str) -> str:
    year = datetime.utcnow().year
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><meta name="viewport" content="width=device-width, initial-scale=1.0"></head>
<body style="margin: 0; padding: 0; background-color: {THEME['background']}; font-family: Arial, sans-serif;">
  <table role="presentation" style="max-width: 500px; margin: 40px auto; background-color: {THEME['card']}; border-radius: 16px;">
    <tr>
      <td style="padding: 32px; text-align: center; background: {THEME['accent']};">
        <h1 style="margin: 0; color: {THEME['background']}; font-size: 24px;">BarberPro</h1>
      </td>
    </tr>
    <tr>
      <td style="padding: 32px;">
        <h2 style="margin: 0 0 16px 0; color: {THEME['accent']}; font-size: 20px;">{heading}</h2>
        <p style="margin: 0 0 24px 0; color: {THEME['text']}; font-size: 16px;">{intro}</p>
        <table role="presentation" style="width: 100%; background-color: {THEME['panel']}; border-radius: 12px; padding: 20px;">
          {details}
        </table>
        <p style="margin: 24px 0 0 0; color: {THEME['muted']}; font-size: 14px;">{footer_note}</p>
      </td>
    </tr>
    <tr>
      <td style="padding: 24px 32px; text-align: center;">
        <p style="margin: 0; color: #666; font-size: 12px;">&copy; {year} BarberPro. All rights reserved.</p>
      </td>
    </tr>
  </table>
</body>
</html>"""


def confirmation_email_template(client_name: str, service_name: str, barber_name: str,
                                appointment_date: str, appointment_time: str) -> str:
    details = (
        _detail_row("Service", service_name)
        + _detail_row("Barber", barber_name)
        + _detail_row("Date", appointment_date, highlight=True)
        + _detail_row("Time", appointment_time, highlight=True)
    )
    return _layout(
        "Appointment confirmed!",
        f"Hi <strong>{escape(client_name)}</strong>, your appointment has been booked.",
        details,
        "You will get a reminder 24 hours before your appointment.",
    )


def reminder_email_template(client_name: str, service_name: str, barber_name: str,
                            appointment_date: str, appointment_time: str) -> str:
    details = (
        _detail_row("Service", service_name)
        + _detail_row("Barber", barber_name)
        + _detail_row("Date", appointment_date, highlight=True)
        + _detail_row("Time", appointment_time, highlight=True)
    )
    return _layout(
        "Appointment reminder",
        f"Hi <strong>{escape(client_name)}</strong>, don't forget: your appointment is <strong>tomorrow</strong>!",
        details,
        "See you tomorrow!",
    )
