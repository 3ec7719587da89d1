from django.template.loader import render_to_string

RECEIPT_SUBJECT = "Payment receipt: {fee_name} ({reference})"

def render_email(subject_template, html_template_path, context, text_template_path=None):
    subject = subject_template.format(**context.get("subject_vars", {}))
    html_body = render_to_string(html_template_path, context)
    text_body = render_to_string(text_template_path, context) if text_template_path else None
    return subject, text_body, html_body
