"""Sample bank messages, one per supported template.

Used by the CLI demo and the diagnostics endpoint to exercise the cascade
against realistic text.
"""

from typing import Dict

SAMPLE_MESSAGES: Dict[str, str] = {
    "bank_of_baroda": (
        "Rs.10.00 Dr. from A/C XXXXXX6313 and Cr. to paytmqr1axzf3q17z@paytm. "
        "Ref:530712345678. AvlBal:Rs1234.56 - BOB"
    ),
    "sbi_upi": (
        "Dear UPI user A/C X5986 debited by 47.0 on date 03Nov25 trf to MAHENDRA BALASO "
        "Refno 530700000000. If not u? call 1800111109. -SBI"
    ),
    "sbi": "Your SBI A/C XX1234 debited by INR 750.00 on 15-JAN-2024. Avl Bal INR 12,450.00",
    "hdfc": "INR 2,500.00 spent on HDFC Bank Card XX1234 at SWIGGY on 2024-01-15. Avl bal INR 12,345.67",
    "icici": "ICICI Bank: Your a/c XX1234 is debited INR 1,000.00 on 15-Jan-24 towards AMAZON. Avl Bal INR 9,000.00",
    "axis": "INR 750.00 has been debited from your Axis Bank A/c no. XX4321 on 15-01-24. Avl Bal INR 5,000.00",
    "upi": "INR 300.00 paid to Amazon India via UPI. Ref No 789012. Bal: INR 8,450.00",
    "upi_received": "INR 1,200.00 received from Priya Sharma. UPI Ref 4123",
    "card_spend": "INR 500.00 spent on Starbucks on 2024-01-15. Your current balance is INR 15,000.00",
    "income": "You have received INR 5,000.00 from John Doe. Your account balance is now INR 17,000.00",
    "not_a_transaction": "This is just a regular message without transaction data",
}

SAMPLE_DEEP_LINK = "myapp://transaction?amount=100&description=Test+Payment&type=income&merchant=TestCo"
