"""
Email Templates - subject and bodies of the signup emails.
"""

from html import escape

WELCOME_SUBJECT = "Finally, financial advice that reduces anxiety"

WELCOME_TEXT = """Hi there,

Thank you for joining the beta.

Here's what makes this different: no overwhelming portfolios, no 47-step plans, no upsells. Just practical education with actions you can take that reduce financial anxiety.

You have 9 lessons and 2 calculators waiting, designed for different life stages:

IF YOU'RE STARTING OUT:
Begin with your Save Number calculator -> shows you exactly how much you need to stop worrying about money forever.

IF YOU'RE ESTABLISHED:
Start with your Spend Number calculator -> reveals how much you can spend guilt-free on whatever makes you happy.

Both take 3 minutes. Pick whichever fits your situation.

Go to Dashboard: https://bit.ly/IA_Dashboard

Two asks:
1. If you find this useful, share it with others: https://bit.ly/IA_Prototype
2. Give us feedback - what's working, what's not, what's missing?

P.S. Don't try to do everything at once. One calculator, then one lesson. Progress beats perfection.

All the Best,
Sanjay Bhargava"""

WAITLIST_SUBJECT = "You're on the ZeroFinanx waitlist!"

WAITLIST_TEXT = """Hi there,

Thanks for joining our waitlist! You'll be among the first to know when ZeroFinanx launches.

Our paid service will include:
- Comprehensive lessons updated weekly
- Advanced calculators for complex scenarios
- US-focused financial guidance
- No ads, no upsells - just education

We'll email you as soon as it's ready. Until then, thanks for your patience!

Share the waitlist: {site_url}/beta-closed

All the Best,
Sanjay Bhargava
ZeroFinanx Team"""


def _as_html(text: str) -> str:
    paragraphs = "".join(
        f"<p>{escape(block).replace(chr(10), '<br>')}</p>" for block in text.split("\n\n")
    )
    return (
        '<div style="font-family: Arial, sans-serif; line-height: 1.6; '
        f'color: #333; max-width: 600px; margin: 0 auto;">{paragraphs}</div>'
    )


def welcome_email() -> tuple[str, str, str]:
    """Returns (subject, text, html) for a new beta customer."""
    return WELCOME_SUBJECT, WELCOME_TEXT, _as_html(WELCOME_TEXT)


def waitlist_email(site_url: str) -> tuple[str, str, str]:
    """Returns (subject, text, html) for a new waitlist entry."""
    text = WAITLIST_TEXT.format(site_url=site_url.rstrip("/"))
    return WAITLIST_SUBJECT, text, _as_html(text)
