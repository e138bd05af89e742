"""Prompt text for field mapping suggestions."""

from typing import Sequence

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant that helps map supplier fields to Zoro fields. "
    "For each Zoro field, suggest either a direct mapping from supplier fields or "
    "a formula that combines multiple supplier fields. "
    "Respond with a JSON object containing the mapping rules."
)

USER_PROMPT_TEMPLATE = """I need to map supplier fields to Zoro fields. Here are the details:

Zoro Fields: {target_fields}

Supplier Fields: {supplier_fields}

For each Zoro field, please suggest either:
1. A direct mapping to a single supplier field (if there's an obvious match)
2. A formula, following these rules:
   - Use JavaScript syntax compatible with expr-eval
   - For conditionals, use ternary format: (condition) ? trueValue : falseValue
   - Compare strings with === and wrap literals in double quotes: status === "YES"
   - Use standard math operators: +, -, *, /
   - Only reference supplier fields from the list above

The formula can be:
- Mathematical operations (e.g., "cost + tax" for price)
- Conditional mappings (e.g., "status === \\"YES\\"")
- String concatenations (e.g., "first_name + \\" \\" + last_name" for full_name)

If no supplier field fits a Zoro field, leave both "direct" and "formula" empty.

Return your response as a JSON object with the following structure:
{{
  "mappings": [
    {{
      "targetField": "zoro_field_name",
      "direct": "supplier_field_name or empty string if using formula",
      "formula": "formula, or empty string if using a direct mapping"
    }}
  ]
}}

Include exactly one entry per Zoro field. Provide the most logical mappings you can identify."""

HINTS_HEADER = "Additional User Instructions:"

# Shown in place of an empty supplier field list
NO_SUPPLIER_FIELDS = "(none)"


def build_user_prompt(
    target_fields: Sequence[str],
    supplier_fields: Sequence[str],
    hints: Sequence[str] = (),
) -> str:
    """Render the user prompt, appending caller supplied business-rule hints."""
    prompt = USER_PROMPT_TEMPLATE.format(
        target_fields=", ".join(target_fields),
        supplier_fields=", ".join(supplier_fields) if supplier_fields else NO_SUPPLIER_FIELDS,
    )
    if hints:
        hint_lines = "\n".join(f"- {hint}" for hint in hints)
        prompt = f"{prompt}\n\n{HINTS_HEADER}\n{hint_lines}"
    return prompt
