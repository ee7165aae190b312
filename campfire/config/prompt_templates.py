"""
Campfire - Prompt Templates
============================
Centralised prompt management for the search assistant.  All prompts live
here so they can be versioned and reviewed independently of application
logic.

Exports
-------
SYSTEM_PROMPT, SEARCH_PROMPT_TEMPLATE, PRODUCT_CONTEXT_TEMPLATE,
NO_CONTEXT_PLACEHOLDER, PRODUCT_INFO_TEMPLATE, NO_ANSWER_RESPONSE.
"""

# ══════════════════════════════════════════════════════════════════════
#  SYSTEM PROMPT: persona and domain guardrails
# ══════════════════════════════════════════════════════════════════════

SYSTEM_PROMPT: str = (
    "You are a useful assistant. You always reply with a short and funny message. "
    "If you do not know an answer, you say 'I don't know that.' "
    "You only answer questions related to outdoor camping products. "
    "For any other type of questions, explain to the user that you only answer outdoor camping products questions. "
    "Do not store memory of the chat conversation."
)


# ══════════════════════════════════════════════════════════════════════
#  SEARCH PROMPT: user-role message with the grounding block
# ══════════════════════════════════════════════════════════════════════
# Placeholders: {question}, {products}

SEARCH_PROMPT_TEMPLATE: str = """You are an intelligent assistant helping clients with their search about outdoor products.
Generate a catchy and friendly message using the information below.
Add a comparison between the products found and the search criteria.
Include products details.
    - User Question: {question}
    - Found Products:
{products}"""


# One entry per matched product, numbered from 1 in match order.
PRODUCT_CONTEXT_TEMPLATE: str = """- Product {position}:
  - Name: {name}
  - Description: {description}
  - Price: {price}"""

NO_CONTEXT_PLACEHOLDER: str = "(No matching products found.)"


# ══════════════════════════════════════════════════════════════════════
#  INDEXING: canonical product text fed to the embedding model
# ══════════════════════════════════════════════════════════════════════
# Must stay stable: changing it changes every product embedding.

PRODUCT_INFO_TEMPLATE: str = "[{name}] is a product that costs [{price}] and is described as [{description}]"


# ══════════════════════════════════════════════════════════════════════
#  FALLBACK
# ══════════════════════════════════════════════════════════════════════

NO_ANSWER_RESPONSE: str = "I don't know the answer for your question. Your question is: [{question}]"
