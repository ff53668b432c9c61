# guardian_ping/messages.py
"""User-facing text: notification titles/bodies, alert copy and spoken phrases."""

from .models import PingType

NOTIFICATION_TITLES = {
    PingType.RING: "Parent Ping \U0001F4DE",
    PingType.LOCATE: "Location Request \U0001F4CD",
    PingType.CHECK_IN: "Check-in Request ✅",
    PingType.EMERGENCY: "\U0001F6A8 EMERGENCY PING \U0001F6A8",
}

NOTIFICATION_BODIES = {
    PingType.RING: "Your parent is trying to reach you. Tap to respond.",
    PingType.LOCATE: "Your parent would like to know your current location.",
    PingType.CHECK_IN: "Your parent has requested a check-in. Let them know how you're doing.",
    PingType.EMERGENCY: "URGENT: Your parent needs to know you are safe immediately.",
}

DEFAULT_TITLE = "Parent Notification"
DEFAULT_BODY = "Your parent has sent you a notification."

# Ring session
RING_TITLE = "Parent Ping"
RING_DEFAULT_MESSAGE = "Your parent is trying to reach you"
RING_SPOKEN = "Your parent is trying to reach you! Tap the notification to respond."
ACTION_STOP_RING = "Stop Ring"
ACTION_RESPOND = "Respond"
RING_RESPONSE_MESSAGE = "Ping received"
RESPONSE_SENT_TITLE = "Response Sent"
RESPONSE_SENT_MESSAGE = "Your parent has been notified that you received their ping."

# Locate
LOCATION_SHARED_SPOKEN = "Your location has been shared with your parent."
LOCATION_ERROR_TITLE = "Location Error"
LOCATION_ERROR_MESSAGE = (
    "Could not get your current location. "
    "Please make sure location services are enabled."
)

# Check-in
CHECK_IN_TITLE = "Check-in Request"
CHECK_IN_DEFAULT_MESSAGE = "Your parent has requested a check-in. How are you doing?"
ACTION_OK = "I'm OK"
ACTION_SAFE = "I'm Safe"
ACTION_NEED_HELP = "Need Help"
ACTION_CUSTOM = "Custom Message"
CHECK_IN_OK = "I'm OK"
CHECK_IN_SAFE = "I'm safe and doing well"
CHECK_IN_HELP = "I need help"
CUSTOM_TITLE = "Check-in Message"
CUSTOM_MESSAGE = "Send a message to your parent:"
CUSTOM_DEFAULT = "I'm doing well!"
CHECK_IN_SENT_SPOKEN = "Check-in message sent to your parent."
HELP_SENT_SPOKEN = "Help request sent to your parent."

# Emergency
EMERGENCY_TITLE = "\U0001F6A8 EMERGENCY PING"
EMERGENCY_DEFAULT_MESSAGE = (
    "Your parent has sent an emergency ping. Please respond immediately."
)
EMERGENCY_SPOKEN = (
    "EMERGENCY: Your parent needs to know you are safe. Please respond right away."
)
ACTION_EMERGENCY_SAFE = "I'm Safe"
ACTION_EMERGENCY_HELP = "I Need Help"
ACTION_CALL_PARENT = "Call Parent"
EMERGENCY_SAFE_MESSAGE = "I'm safe and OK"
EMERGENCY_HELP_MESSAGE = "I need help right now"
HELP_REQUEST_TITLE = "Help Request Sent"
HELP_REQUEST_MESSAGE = "Your parent and emergency contacts have been notified."
CALL_TITLE = "Emergency Call"
CALL_MESSAGE = "Calling your parent now..."


def notification_title(ping_type: PingType) -> str:
    return NOTIFICATION_TITLES.get(ping_type, DEFAULT_TITLE)


def notification_body(ping_type: PingType) -> str:
    return NOTIFICATION_BODIES.get(ping_type, DEFAULT_BODY)
