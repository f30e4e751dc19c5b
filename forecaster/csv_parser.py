"""
Quote-aware CSV tokenizer.

Turns raw export text into rows of trimmed string cells. A double quote
toggles quoted mode, two consecutive quotes inside a quoted field decode to a
single literal quote, and commas or line breaks inside quotes are kept as
field content. No header or type inference happens here.
"""

QUOTE = '"'
DELIMITER = ","


def parse_csv(text: str) -> list[list[str]]:
    rows: list[list[str]] = []
    current_row: list[str] = []
    current_val: list[str] = []
    inside_quote = False

    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ""

        if char == QUOTE:
            if inside_quote and next_char == QUOTE:
                current_val.append(QUOTE)
                i += 1
            else:
                inside_quote = not inside_quote
        elif char == DELIMITER and not inside_quote:
            current_row.append("".join(current_val).strip())
            current_val = []
        elif char in ("\n", "\r") and not inside_quote:
            if char == "\r" and next_char == "\n":
                i += 1
            current_row.append("".join(current_val).strip())
            rows.append(current_row)
            current_row = []
            current_val = []
        else:
            current_val.append(char)
        i += 1

    # Final line without a trailing newline
    if current_row or current_val:
        current_row.append("".join(current_val).strip())
        rows.append(current_row)

    # A blank line is a single empty cell; rows of empty cells (",,") are kept
    return [row for row in rows if row != [""]]
