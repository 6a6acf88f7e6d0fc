"""
Supported currencies: US Dollar and common African currencies.
Used at sign-up and for displaying prices in the user's preferred currency.
"""

from typing import Any, Dict, List, Optional

CURRENCIES: List[Dict[str, str]] = [
    {"code": "USD", "name": "US Dollar", "symbol": "$"},
    {"code": "NGN", "name": "Nigerian Naira", "symbol": "₦"},
    {"code": "GHS", "name": "Ghanaian Cedi", "symbol": "₵"},
    {"code": "KES", "name": "Kenyan Shilling", "symbol": "KSh"},
    {"code": "ZAR", "name": "South African Rand", "symbol": "R"},
    {"code": "XOF", "name": "West African CFA Franc", "symbol": "CFA"},
    {"code": "XAF", "name": "Central African CFA Franc", "symbol": "FCFA"},
    {"code": "EGP", "name": "Egyptian Pound", "symbol": "E£"},
    {"code": "TZS", "name": "Tanzanian Shilling", "symbol": "TSh"},
    {"code": "UGX", "name": "Ugandan Shilling", "symbol": "USh"},
    {"code": "ETB", "name": "Ethiopian Birr", "symbol": "Br"},
    {"code": "MAD", "name": "Moroccan Dirham", "symbol": "DH"},
]

NO_VALUE = "—"


def get_currency_by_code(code: Optional[str]) -> Optional[Dict[str, str]]:
    return next((c for c in CURRENCIES if c["code"] == code), None)


def format_currency_label(code: Optional[str]) -> str:
    currency = get_currency_by_code(code)
    if currency:
        return f"{currency['name']} ({currency['code']})"
    return code or NO_VALUE


def format_price(amount: Any, code: Optional[str] = None) -> str:
    """Symbol plus amount with thousands separators and two decimals. Falls back to USD."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return NO_VALUE
    if value != value:  # NaN
        return NO_VALUE
    currency = get_currency_by_code(code or "USD")
    symbol = currency["symbol"] if currency else "$"
    return f"{symbol}{value:,.2f}"


def get_currency_symbol(code: Optional[str]) -> str:
    currency = get_currency_by_code(code)
    return currency["symbol"] if currency else NO_VALUE
