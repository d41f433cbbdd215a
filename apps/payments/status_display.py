"""
Perspective-dependent labels for payment request statuses.

Pure functions: they read a status string and the viewer's role and return
text. They never change a request.
"""

# Only ``sent`` reads differently for the two sides.
_CONTEXTUAL_LABELS = {
    'sent': {'payee': 'Sent', 'payer': 'Waiting for your response'},
}

_DESCRIPTIONS = {
    'pending': (
        'Request created. Waiting for it to be sent.',
        'You have a new payment request.',
    ),
    'sent': (
        'You sent a request. Waiting for their response.',
        'You have a new payment request.',
    ),
    'accepted': (
        'They agreed to pay. Waiting for them to mark as paid.',
        'You accepted. You can now mark this as paid.',
    ),
    'paid_pending_confirmation': (
        'They marked this as paid. Please confirm you received it.',
        'You marked this as paid. Waiting for their confirmation.',
    ),
    'completed': (
        'They marked this as paid.',
        'You marked this as paid.',
    ),
    'rejected': (
        'They declined the request.',
        'You declined the request.',
    ),
    'cancelled': (
        'You cancelled this request.',
        'They cancelled this request.',
    ),
    'disputed': (
        'You disputed this payment.',
        'They disputed this payment.',
    ),
}


def get_contextual_status(status, *, is_payer, is_payee):
    """
    Label for ``status`` as seen by the viewer.

    Args:
        status: Stored status string
        is_payer: Viewer owes the money
        is_payee: Viewer is owed the money

    Returns:
        str: "Sent" for the payee and "Waiting for your response" for the
        payer of a sent request; the status string unchanged otherwise.
    """
    labels = _CONTEXTUAL_LABELS.get(status)
    if labels is None:
        return status
    if is_payee:
        return labels['payee']
    if is_payer:
        return labels['payer']
    return status


def get_status_description(status, *, is_payee):
    """One-sentence explanation of ``status`` from the viewer's side."""
    descriptions = _DESCRIPTIONS.get(status)
    if descriptions is None:
        return f"Status: {status}"
    payee_text, payer_text = descriptions
    return payee_text if is_payee else payer_text
