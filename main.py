"""Cloud Functions entry point.

The package lives under src/, so it must be installed before this module
can import it. requirements.txt holds `.`, which makes the Cloud Functions
build install it from pyproject.toml:

    gcloud functions deploy billing-notification --gen2 --runtime python311 \
        --source . --entry-point billing_notification --trigger-http

For local runs, install it first and then serve the function:

    pip install -e .
    functions-framework --target billing_notification
"""

from billing_export_notifier.handlers.billing_notification import billing_notification

__all__ = ["billing_notification"]
