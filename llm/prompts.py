"""
Prompt rendering for SMS transaction extraction.
Embeds the live account and category catalog so the model can only pick known names.
"""
from core.schema import Catalog


def format_catalog_list(names) -> str:
    """Render names as an indented bullet list."""
    return "\n".join(f"  - {name}" for name in names)


def build_extraction_prompt(sms: str, catalog: Catalog) -> str:
    """
    Build the extraction prompt for a single SMS.

    Args:
        sms: Raw SMS text
        catalog: Active accounts and visible categories

    Returns:
        Complete prompt string
    """
    accounts_list = format_catalog_list(a.name for a in catalog.accounts)
    categories_list = format_catalog_list(c.name for c in catalog.categories)

    prompt = f"""
You are a financial transaction parser.

You will receive ONE SMS message from a bank, card issuer, insurer, or UPI system.

FIRST DECIDE:
Does this SMS confirm a COMPLETED financial transaction
(money has already been debited or credited)?

NOT a transaction:
- premium due reminders, upcoming charges, standing instruction notices
- payment reminders, OTPs, promotions, warnings, balance alerts
- "will be deducted", "due on", "scheduled", "if paid", "may be charged"

IF NOT a completed transaction: return JSON with ALL fields set to null

AVAILABLE ACCOUNTS:
{accounts_list}

AVAILABLE CATEGORIES:
{categories_list}

RULES:
1. AMOUNT SIGN:
   - DEBIT/SPENT/PAID/WITHDRAWN/PURCHASE = NEGATIVE (e.g., "Rs.500 debited" -> -500)
   - CREDIT/RECEIVED/REFUND/CASHBACK = POSITIVE (e.g., "Rs.100 credited" -> 100)

2. ACCOUNT: Pick an account from the AVAILABLE ACCOUNTS list above.
   - First try the last 4 digits in the SMS (e.g., "Card 6101", "XX2979")
   - If no digits match, use the bank/card name (e.g., "HSBC" in SMS -> "HSBC ****0001")
   - Always return an account name exactly as listed; never invent or modify names

3. CATEGORY: Pick the best matching category name from the list, or null if uncertain

4. Output ONLY valid JSON, no markdown, no explanation
5. Date format: YYYY-MM-DD or null
6. Description: merchant name only, no card numbers

OUTPUT FORMAT:
{{
  "amount": number | null,
  "description": string | null,
  "date": string | null,
  "account": string | null,
  "category": string | null
}}

SMS:
{sms}"""

    return prompt.strip()
