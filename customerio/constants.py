"""Customer.io endpoint and option tables.

Base URLs per API family and region, plus the static option lists shared by
the action node and the reporting-webhook trigger.
"""

TRACK_API_HOSTS = {
    "us": "https://track.customer.io",
    "eu": "https://track-eu.customer.io",
}

TRACK_API_ENDPOINTS = {
    "us": "https://track.customer.io/api/v1",
    "eu": "https://track-eu.customer.io/api/v1",
}

APP_API_ENDPOINTS = {
    "us": "https://api.customer.io/v1",
    "eu": "https://api-eu.customer.io/v1",
}

# CDP has a single endpoint for every region
PIPELINES_API_ENDPOINT = "https://cdp.customer.io/v1"

BETA_API_ENDPOINTS = {
    "us": "https://beta-api.customer.io/v1/api",
    "eu": "https://beta-api-eu.customer.io/v1/api",
}

REGIONS = ("us", "eu")


# ---------------------------------------------------------------------------
# Reporting webhook events
# ---------------------------------------------------------------------------

# (display name, value, description)
WEBHOOK_EVENTS = [
    ("Email Sent", "email_sent", "Triggered when an email is sent"),
    ("Email Delivered", "email_delivered", "Triggered when an email is delivered"),
    ("Email Opened", "email_opened", "Triggered when an email is opened"),
    ("Email Clicked", "email_clicked", "Triggered when a link in an email is clicked"),
    ("Email Bounced", "email_bounced", "Triggered when an email bounces"),
    ("Email Unsubscribed", "email_unsubscribed", "Triggered when someone unsubscribes"),
    ("Email Complained", "email_complained", "Triggered when an email is marked as spam"),
    ("Email Converted", "email_converted", "Triggered when an email conversion is tracked"),
    ("Push Sent", "push_sent", "Triggered when a push notification is sent"),
    ("Push Opened", "push_opened", "Triggered when a push notification is opened"),
    ("Push Clicked", "push_clicked", "Triggered when a push notification is clicked"),
    ("SMS Sent", "sms_sent", "Triggered when an SMS is sent"),
    ("SMS Delivered", "sms_delivered", "Triggered when an SMS is delivered"),
    ("SMS Clicked", "sms_clicked", "Triggered when a link in an SMS is clicked"),
    ("SMS Failed", "sms_failed", "Triggered when an SMS fails to deliver"),
    ("Webhook Sent", "webhook_sent", "Triggered when a webhook is sent"),
    ("Webhook Clicked", "webhook_clicked", "Triggered when a webhook link is clicked"),
    ("Slack Sent", "slack_sent", "Triggered when a Slack message is sent"),
    ("Slack Clicked", "slack_clicked", "Triggered when a Slack message link is clicked"),
    ("In-App Sent", "in_app_sent", "Triggered when an in-app message is sent"),
    ("In-App Opened", "in_app_opened", "Triggered when an in-app message is opened"),
    ("In-App Clicked", "in_app_clicked", "Triggered when an in-app message is clicked"),
]

WEBHOOK_EVENT_VALUES = frozenset(value for _, value, _ in WEBHOOK_EVENTS)

# Object types whose metric is prefixed to build the event category
WEBHOOK_OBJECT_TYPES = ("email", "push", "sms", "webhook", "slack", "in_app")

# Event categories that don't map 1:1 onto an event value
WEBHOOK_EVENT_ALIASES = {
    "email_spamreport": "email_complained",
}


# ---------------------------------------------------------------------------
# Option tables
# ---------------------------------------------------------------------------

EXPORT_TYPES = ("customers", "deliveries", "newsletter_deliveries")

METRIC_PERIODS = ("days", "weeks", "months")

MESSAGE_METRICS = (
    "attempted",
    "bounced",
    "clicked",
    "converted",
    "created",
    "delivered",
    "drafted",
    "dropped",
    "failed",
    "opened",
    "sent",
    "spammed",
    "unsubscribed",
)

MESSAGE_CHANNELS = ("email", "push", "slack", "sms", "webhook")

ACTIVITY_TYPES = (
    "page",
    "event",
    "attribute_change",
    "failed_attribute_change",
    "stripe_event",
    "drafted_email",
    "sent_email",
    "bounced_email",
    "opened_email",
    "converted_email",
    "clicked_email",
    "unsubscribed_email",
    "marked_email_as_spam",
    "subscribed_email",
    "sent_push",
    "opened_push",
    "converted_push",
    "clicked_push",
    "sent_sms",
    "delivered_sms",
    "clicked_sms",
    "undelivered_sms",
    "converted_sms",
    "sent_slack",
    "clicked_slack",
    "converted_slack",
    "sent_webhook",
    "clicked_webhook",
    "converted_webhook",
    "entered_segment",
    "exited_segment",
    "enrolled_campaign",
    "started_campaign_workflow",
    "paused_campaign_workflow",
    "finished_campaign_workflow",
    "exited_campaign_workflow",
)

DEFAULT_PAGE_SIZE = 100
DEFAULT_LIST_LIMIT = 50
