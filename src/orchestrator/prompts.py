"""
src/orchestrator/prompts.py

Sample user prompts for the demo tool set, offered as presets in the app.
"""


from typing import Dict


EXAMPLE_PROMPTS: Dict[str, str] = {
    "Sum then branch": (
        "Make the sum of 40 and 2, "
        "If the result is higher than 40 "
        "Then say hello to Bob Else to Sam"
    ),
    "Sum then branch (low)": (
        "Make the sum of 30 and 2, "
        "If the result is higher than 40 "
        "Then say hello to Bob Else to Sam"
    ),
    "Several calls": (
        "Make the sum of 40 and 2, "
        "then say hello to Bob and to Sam, "
        "make the sum of 5 and 37. "
        "Say hello to Alice"
    ),
    "No tool needed": (
        "The best pizza topping is pineapple. What is the capital of France?"
    ),
}

DEFAULT_PROMPT: str = EXAMPLE_PROMPTS["Sum then branch"]
