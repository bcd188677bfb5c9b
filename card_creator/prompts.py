"""
Prompt templates sent to the generative model.
"""

from card_creator.structures import Language


def create_image_extraction_prompt() -> str:
    """Create prompt asking the model to read text from a photo."""
    return (
        "Please analyze this image and extract any text or words you can find. "
        "Format the output as a simple list of words."
    )


def create_question_prompt(question: str) -> str:
    """Create prompt for a free question whose answer becomes card material."""
    return f"""Answer the following question clearly and factually.
Write the answer as a few short paragraphs of plain text without markdown.

Question:
{question}"""


def create_vocabulary_prompt(content: str, language: Language) -> str:
    """Create prompt for vocabulary extraction and translation."""
    return f"""Extract vocabulary words from this text and translate them to {language.name}. Return ONLY a simple list where each line contains the word in the original language, followed by a semicolon, and then the word in {language.name}. Example format:
original_word;translated_word
Here is the text:
{content}"""


def create_qa_prompt(content: str, language: Language) -> str:
    """Create prompt for question/answer card generation."""
    return f"""You are an expert in creating Anki flashcards. Create question-answer pairs from the following text.
The text is in the original language. Create questions and answers in the original language,
and add {language.name} translations in parentheses.

Follow these Anki best practices:
- Questions should be specific and clear
- Each question should test one concept
- Answers should be concise
- Avoid yes/no questions
- Use the minimum information principle

Format EXACTLY like this, with one blank line between pairs:
F: [Original Question] ({language.name} translation of question)
A: [Original Answer] ({language.name} translation of answer)

Example format:
F: Wo liegt Paris? (Where is Paris?)
A: Paris liegt in Frankreich (Paris is in France)

Text to process:
{content}"""
