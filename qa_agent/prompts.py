"""QA task prompt templates and task-name routing."""

BUG_ANALYSIS = """Analyze the following bug description or log and provide a structured output in this format:

- Bug Title: Clear and concise summary
- Possible Cause: Potential cause from system, UI/UX, backend, API, or database
- Steps to Reproduce: Detailed steps to reproduce the bug
- Expected Result: What should have happened
- Actual Result: What actually happened
- Impact Level: Low / Medium / High / Critical, based on user impact
- Suggested Next Step: Recommended action for the QA/Dev team
"""

SCENARIO_PRIORITY_ANALYSIS = """Analyze the following test scenarios and determine their priority (High, Medium, Low) based on user impact, likelihood, and implementation complexity. Provide a logical justification for each assessment.

Output format:
- Scenario Description: [Scenario summary]
- Priority: [High / Medium / Low]
- Justification: [Reason for the chosen priority based on user impact, usage frequency, and technical risk]
"""

TEST_DATA_GENERATOR = """Generate test data based on the following scenario description. The output must be a valid JSON array of objects. Each object represents a data field and includes:
- "fieldName": Name of the required field
- "validData": Valid value for positive testing
- "invalidData": Invalid value for negative testing (error/validation handling)
- "edgeCaseData": Value at the boundaries or extreme limits
- "justification": Brief reason for choosing this data set

Do not include any text or formatting outside of the JSON array.
"""

API_CONTRACT_TEST = """Based on the following example JSON payload, act as a QA Automation Engineer and generate a comprehensive API contract test suite in Markdown.

First infer the contract for each field:
1. Data Type (string, number, boolean, array, object, null).
2. Constraints (required, optional, formats such as email or UUID, enum values).
3. Potential Edge Cases (empty strings, 0, negative numbers, empty arrays, unexpected nulls).

Then produce two Markdown tables:

### Positive Test Cases (Happy Path)
A valid payload conforming to every inferred rule.

### Negative Test Cases (Unhappy Path)
- One test per field with the wrong data type.
- One test per missing required field.
- One test per field with an invalid format or value.
- One test for each other broken constraint (length, range).
"""

SUMMARIZE = "Summarize the following text into a few key points:"

TRANSLATE = "Translate the following text to English:"

CODE_REVIEW = (
    "Act as a senior software engineer and perform a thorough code review on the following snippet. "
    "Focus on best practices, performance, security vulnerabilities, and potential bugs. "
    "Provide constructive feedback with code examples where possible."
)

CUSTOM_TASK = ""

TEMPLATES: dict[str, str] = {
    "bug_analysis": BUG_ANALYSIS,
    "scenario_priority": SCENARIO_PRIORITY_ANALYSIS,
    "test_data_generator": TEST_DATA_GENERATOR,
    "api_contract_test": API_CONTRACT_TEST,
    "summarize": SUMMARIZE,
    "translate": TRANSLATE,
    "code_review": CODE_REVIEW,
    "custom": CUSTOM_TASK,
}

INPUT_HINTS: dict[str, str] = {
    "bug_analysis": "Enter the bug details, error, or log to analyze",
    "scenario_priority": "Enter the scenarios or requirements to prioritize",
    "test_data_generator": "Enter the test data requirements or scenario",
    "api_contract_test": "Enter the example JSON payload",
    "summarize": "Enter the text to summarize",
    "translate": "Enter the text to translate",
    "code_review": "Enter the code to review",
    "custom": "Enter the input description/log",
}

# First matching fragment wins, so more specific fragments come first
_ROUTES: list[tuple[tuple[str, ...], str]] = [
    (("bug",), "bug_analysis"),
    (("test_data", "test data"), "test_data_generator"),
    (("priority",), "scenario_priority"),
    (("api", "contract"), "api_contract_test"),
    (("summar",), "summarize"),
    (("translat",), "translate"),
    (("review",), "code_review"),
]


def resolve_task(task_name: str) -> tuple[str, str]:
    """Map a free-text task name to (template_key, template).

    Unrecognized names fall back to the empty custom template.
    """
    name = task_name.strip().lower()
    for fragments, key in _ROUTES:
        if any(fragment in name for fragment in fragments):
            return key, TEMPLATES[key]
    return "custom", CUSTOM_TASK


def build_prompt(template: str, user_input: str) -> str:
    """Prefix the user input with the task instructions, if any."""
    if not template:
        return user_input
    return f"{template}\n\n{user_input}"
