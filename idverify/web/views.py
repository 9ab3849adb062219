"""
HTML views for the verification form.

Pages are composed from small functions returning HTML fragments; every
user-supplied value goes through html.escape. The markup posts plain forms to
the /flow endpoints, and a small script sends each keystroke to /flow/field so
the server applies input rules (digits only, upper-casing) as the user types.
"""
import re
from html import escape
from typing import Dict, Optional

from idverify.core.flow import FormFlow, GENERAL
from idverify.core.state_machine import Step, PROGRESS_STEPS
from idverify.settings import settings


def group_identity_number(value: str) -> str:
    """'123456789012' -> '1234 5678 9012'; other values are returned unchanged."""
    return re.sub(r"([0-9]{4})([0-9]{4})([0-9]{4})", r"\1 \2 \3", value or "", count=1)


def _attr(v) -> str:
    return escape(str(v), quote=True)


def progress_steps(current: Step) -> str:
    items = []
    for i, (step, title, description) in enumerate(PROGRESS_STEPS):
        reached = current.number >= step.number
        done = current.number > step.number
        badge = "&#10003;" if done else str(step.number)
        item = (
            f'<li class="progress-step{" reached" if reached else ""}{" done" if done else ""}">'
            f'<span class="badge">{badge}</span>'
            f'<span class="title">{escape(title)}</span>'
            f'<span class="description">{escape(description)}</span>'
            f"</li>"
        )
        items.append(item)
        if i < len(PROGRESS_STEPS) - 1:
            items.append(f'<li class="connector{" done" if done else ""}" aria-hidden="true"></li>')
    return f'<ol class="progress">{"".join(items)}</ol>'


def input_field(
    label: str,
    name: str,
    value: str,
    error: Optional[str] = None,
    placeholder: str = "",
    input_type: str = "text",
    maxlength: Optional[int] = None,
    inputmode: Optional[str] = None,
    uppercase: bool = False,
) -> str:
    attrs = [
        f'type="{_attr(input_type)}"',
        f'id="{_attr(name)}"',
        f'name="{_attr(name)}"',
        f'value="{_attr(value or "")}"',
        'data-live="1"',
    ]
    if placeholder:
        attrs.append(f'placeholder="{_attr(placeholder)}"')
    if maxlength:
        attrs.append(f'maxlength="{int(maxlength)}"')
    if inputmode:
        attrs.append(f'inputmode="{_attr(inputmode)}"')
    if uppercase:
        attrs.append('style="text-transform: uppercase"')
    if error:
        attrs.append('class="invalid" aria-invalid="true"')

    err_html = f'<p class="field-error" role="alert">{escape(error)}</p>' if error else ""
    return (
        f'<div class="field">'
        f'<label for="{_attr(name)}">{escape(label)} <span class="required">*</span></label>'
        f'<input {" ".join(attrs)}>'
        f"{err_html}"
        f"</div>"
    )


def error_banner(errors: Dict[str, str]) -> str:
    msg = errors.get(GENERAL)
    if not msg:
        return ""
    return (
        f'<div class="banner banner-error" role="alert">'
        f"<span>{escape(msg)}</span>"
        '<button type="submit" formaction="/flow/dismiss-error" formnovalidate class="link" aria-label="Dismiss">'
        "&times;</button>"
        f"</div>"
    )


def identity_step(flow: FormFlow) -> str:
    d, errors = flow.draft, flow.errors
    otp_block = ""
    if flow.otp_sent:
        remaining = flow.resend_remaining
        if remaining > 0:
            resend = f'<p>Resend OTP in <span id="resend-seconds" data-seconds="{remaining}">{remaining}</span> seconds</p>'
        else:
            resend = (
                '<button type="submit" formaction="/flow/identity/resend" class="link">Resend OTP</button>'
            )
        otp_block = (
            f'<div class="otp-panel">'
            f'<p class="notice">OTP sent to {escape(d.mobileNumber)}</p>'
            + input_field("Enter OTP", "otp", d.otp, errors.get("otp"),
                          placeholder="Enter 6-digit OTP", maxlength=6, inputmode="numeric")
            + f'<p class="hint">Demo: Use <code>{escape(settings.DEMO_OTP)}</code> as OTP</p>'
            + resend
            + "</div>"
        )

    return (
        '<section class="card">'
        '<h2>Identity Verification</h2>'
        '<p class="lead">Enter your identity number to verify your identity</p>'
        '<form method="post" action="/flow/identity">'
        + input_field("Identity Number", "identityNumber", d.identityNumber, errors.get("identityNumber"),
                      placeholder="Enter 12-digit identity number", maxlength=12, inputmode="numeric")
        + input_field("Mobile Number", "mobileNumber", d.mobileNumber, errors.get("mobileNumber"),
                      placeholder="Enter 10-digit mobile number", maxlength=10, inputmode="numeric")
        + otp_block
        + error_banner(errors)
        + f'<button type="submit" class="primary">{"Verify OTP" if flow.otp_sent else "Generate OTP"}</button>'
        + "</form>"
        "</section>"
    )


def tax_step(flow: FormFlow) -> str:
    d, errors = flow.draft, flow.errors
    return (
        '<section class="card">'
        '<h2>Tax ID Verification</h2>'
        '<p class="lead">Enter your tax ID details for verification</p>'
        '<form method="post" action="/flow/tax">'
        + input_field("Tax ID", "taxId", d.taxId, errors.get("taxId"),
                      placeholder="Enter tax ID (e.g., ABCDE1234F)", maxlength=10, uppercase=True)
        + input_field("Name as per Tax ID", "fullName", d.fullName, errors.get("fullName"),
                      placeholder="Enter name as per tax ID card", maxlength=100)
        + input_field("Date of Birth", "dateOfBirth", d.dateOfBirth, errors.get("dateOfBirth"),
                      input_type="date")
        + error_banner(errors)
        + '<div class="actions">'
        '<button type="submit" formaction="/flow/tax/back" formnovalidate class="secondary">Back</button>'
        '<button type="submit" class="primary">Verify Tax ID</button>'
        "</div>"
        "</form>"
        "</section>"
    )


def success_page(flow: FormFlow) -> str:
    d = flow.draft
    return (
        '<section class="card success">'
        "<h2>Verification Complete!</h2>"
        '<p class="lead">Your identity and tax ID verification has been completed successfully. '
        "You can now proceed with the registration process.</p>"
        '<div class="summary">'
        "<h3>Verification Summary:</h3>"
        "<ul>"
        "<li>&#10003; Identity verification completed</li>"
        "<li>&#10003; Mobile number verified</li>"
        "<li>&#10003; Tax ID details validated</li>"
        "</ul>"
        "<dl>"
        f"<dt>Identity Number</dt><dd>{escape(group_identity_number(d.identityNumber))}</dd>"
        f"<dt>Mobile</dt><dd>{escape(d.mobileNumber)}</dd>"
        f"<dt>Tax ID</dt><dd>{escape(d.taxId)}</dd>"
        f"<dt>Name</dt><dd>{escape(d.fullName)}</dd>"
        "</dl>"
        "</div>"
        '<form method="post" action="/flow/restart">'
        '<button type="submit" class="primary">Start New Registration</button>'
        "</form>"
        "</section>"
    )


_STYLE = """
body{font-family:system-ui,sans-serif;background:#eef2ff;margin:0;padding:2rem 1rem;color:#111827}
main{max-width:42rem;margin:0 auto}
header,footer{text-align:center}
.card{background:#fff;border:1px solid #e5e7eb;border-radius:.5rem;padding:2rem;margin-bottom:1.5rem}
.progress{display:flex;list-style:none;padding:1.5rem;background:#fff;border-radius:.5rem;align-items:center}
.progress-step{display:flex;gap:.5rem;align-items:center;color:#6b7280}
.progress-step.reached{color:#2563eb}
.badge{display:inline-flex;width:2.5rem;height:2.5rem;border-radius:50%;border:2px solid currentColor;align-items:center;justify-content:center}
.progress-step .description{font-size:.75rem;color:#6b7280}
.connector{flex:1;height:2px;background:#e5e7eb;margin:0 1rem}
.connector.done{background:#2563eb}
.field{margin-bottom:1.25rem}
.field label{display:block;font-weight:500;margin-bottom:.5rem}
.field input{width:100%;padding:.75rem;border:1px solid #d1d5db;border-radius:.5rem;box-sizing:border-box}
.field input.invalid{border-color:#ef4444;background:#fef2f2}
.required,.field-error{color:#dc2626}
.banner-error{display:flex;justify-content:space-between;background:#fef2f2;border:1px solid #fecaca;padding:1rem;border-radius:.5rem;margin-bottom:1rem}
.otp-panel{background:#f0fdf4;border:1px solid #bbf7d0;padding:1rem;border-radius:.5rem;margin-bottom:1rem}
.actions{display:flex;gap:1rem}
button.primary{background:#2563eb;color:#fff;border:0;padding:.75rem 1.5rem;border-radius:.5rem;width:100%}
button.secondary{background:#f3f4f6;border:0;padding:.75rem 1.5rem;border-radius:.5rem;width:100%}
button.link{background:none;border:0;color:#2563eb;text-decoration:underline;cursor:pointer}
"""

_SCRIPT = """
(function(){
  document.querySelectorAll('input[data-live]').forEach(function(el){
    var last = el.value;
    el.addEventListener('input', function(){
      fetch('/flow/field', {method:'POST', headers:{'Content-Type':'application/json'},
        body: JSON.stringify({name: el.name, value: el.value})})
        .then(function(r){ return r.json(); })
        .then(function(res){
          if (!res.accepted) { el.value = last; return; }
          el.value = res.value; last = res.value;
          if (!res.errors[el.name]) {
            el.classList.remove('invalid');
            var err = el.parentNode.querySelector('.field-error');
            if (err) err.remove();
          }
        });
    });
  });
  var counter = document.getElementById('resend-seconds');
  if (counter) {
    var left = parseInt(counter.dataset.seconds, 10);
    var timer = setInterval(function(){
      left -= 1;
      if (left <= 0) { clearInterval(timer); window.location.reload(); return; }
      counter.textContent = left;
    }, 1000);
  }
})();
"""


def render_page(flow: FormFlow) -> str:
    step = flow.step
    if step == Step.IDENTITY:
        body = identity_step(flow)
    elif step == Step.TAX:
        body = tax_step(flow)
    else:
        body = success_page(flow)

    progress = progress_steps(step) if step != Step.SUCCESS else ""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<meta name="description" content="Identity and tax ID verification">
<title>Identity Verification - Registration Portal</title>
<style>{_STYLE}</style>
</head>
<body>
<main>
<header>
<h1>Identity Verification</h1>
<p>Two-step identity and tax ID verification</p>
</header>
{progress}
{body}
<footer>
<p>This is a demo application for educational purposes</p>
</footer>
</main>
<script>{_SCRIPT}</script>
</body>
</html>
"""
