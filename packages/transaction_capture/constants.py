"""Category identifiers and the default ledger roster.

The category cascade books straight into these ids, so they must match
the rows seeded in the ledger's ``categories`` table.
"""

from typing import Dict, List

from .models import Category


class CategoryId:
    """Ledger category ids used by the category cascade."""

    # Income
    SALARY = "66666666-6666-6666-6666-666666666661"
    FREELANCE = "66666666-6666-6666-6666-666666666662"
    BUSINESS_INCOME = "66666666-6666-4666-a666-666666666663"
    INVESTMENT_RETURNS = "66666666-6666-6666-6666-666666666664"
    OTHER_INCOME = "66666666-6666-4666-a666-666666666684"

    # Expense
    GROCERIES = "66666666-6666-6666-6666-666666666665"
    UTILITIES = "66666666-6666-6666-6666-666666666666"
    RENT = "66666666-6666-6666-6666-666666666667"
    TRANSPORTATION = "66666666-6666-6666-6666-666666666668"
    DINING = "66666666-6666-6666-6666-666666666669"
    SHOPPING = "66666666-6666-6666-6666-666666666670"
    ENTERTAINMENT = "66666666-6666-6666-6666-666666666671"
    HEALTHCARE = "66666666-6666-6666-6666-666666666672"
    BUSINESS_MATERIALS = "66666666-6666-6666-6666-666666666673"
    BUSINESS_MAINTENANCE = "66666666-6666-6666-6666-666666666674"
    EDUCATION = "66666666-6666-6666-6666-666666666675"
    PERSONAL_CARE = "66666666-6666-6666-6666-666666666676"
    GIFTS = "66666666-6666-4666-a666-666666666677"
    INSURANCE = "66666666-6666-6666-6666-666666666678"
    LOAN_EMI = "66666666-6666-6666-6666-666666666679"
    TAX = "66666666-6666-6666-6666-666666666680"
    SIP_INVESTMENT = "66666666-6666-6666-6666-666666666682"

    # Transfer
    ACCOUNT_TRANSFER = "66666666-6666-6666-6666-666666666681"
    SAVINGS_TRANSFER = "66666666-6666-6666-6666-666666666683"


DEFAULT_EXPENSE_CATEGORY_ID = CategoryId.SHOPPING
DEFAULT_INCOME_CATEGORY_ID = CategoryId.OTHER_INCOME

DEFAULT_CATEGORIES: List[Category] = [
    Category(CategoryId.SALARY, "Salary", "income"),
    Category(CategoryId.FREELANCE, "Freelance", "income"),
    Category(CategoryId.BUSINESS_INCOME, "Business Income", "income"),
    Category(CategoryId.INVESTMENT_RETURNS, "Investment Returns", "income"),
    Category(CategoryId.OTHER_INCOME, "Other Income", "income"),
    Category(CategoryId.GROCERIES, "Groceries", "expense"),
    Category(CategoryId.UTILITIES, "Utilities", "expense"),
    Category(CategoryId.RENT, "Rent", "expense"),
    Category(CategoryId.TRANSPORTATION, "Transportation", "expense"),
    Category(CategoryId.DINING, "Dining & Food", "expense"),
    Category(CategoryId.SHOPPING, "Shopping", "expense"),
    Category(CategoryId.ENTERTAINMENT, "Entertainment", "expense"),
    Category(CategoryId.HEALTHCARE, "Healthcare", "expense"),
    Category(CategoryId.BUSINESS_MATERIALS, "Business Materials", "expense"),
    Category(CategoryId.BUSINESS_MAINTENANCE, "Business Maintenance", "expense"),
    Category(CategoryId.EDUCATION, "Education", "expense"),
    Category(CategoryId.PERSONAL_CARE, "Personal Care", "expense"),
    Category(CategoryId.GIFTS, "Gifts & Donations", "expense"),
    Category(CategoryId.INSURANCE, "Insurance", "expense"),
    Category(CategoryId.LOAN_EMI, "Loan EMI", "expense"),
    Category(CategoryId.TAX, "Tax Payments", "expense"),
    Category(CategoryId.SIP_INVESTMENT, "SIP Investment", "expense"),
    Category(CategoryId.ACCOUNT_TRANSFER, "Account Transfer", "transfer"),
    Category(CategoryId.SAVINGS_TRANSFER, "Savings Transfer", "transfer"),
]

# Category names a structured payload may carry explicitly.
CATEGORY_ALIASES: Dict[str, str] = {
    "food": CategoryId.DINING,
    "dining": CategoryId.DINING,
    "restaurant": CategoryId.DINING,
    "groceries": CategoryId.GROCERIES,
    "grocery": CategoryId.GROCERIES,
    "transport": CategoryId.TRANSPORTATION,
    "transportation": CategoryId.TRANSPORTATION,
    "shopping": CategoryId.SHOPPING,
    "entertainment": CategoryId.ENTERTAINMENT,
    "bills": CategoryId.UTILITIES,
    "utilities": CategoryId.UTILITIES,
    "healthcare": CategoryId.HEALTHCARE,
    "medical": CategoryId.HEALTHCARE,
    "education": CategoryId.EDUCATION,
    "rent": CategoryId.RENT,
    "salary": CategoryId.SALARY,
    "freelance": CategoryId.FREELANCE,
    "income": CategoryId.OTHER_INCOME,
}


def resolve_category_alias(name) -> str:
    """Map an explicit category name (or id) to a ledger id; '' if unknown."""
    if not name or not isinstance(name, str):
        return ""
    key = name.strip().lower()
    if key in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[key]
    known_ids = {category.id for category in DEFAULT_CATEGORIES}
    return name.strip() if name.strip() in known_ids else ""
