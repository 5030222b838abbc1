# SELECTION_PROMPT: used to let the model pick the next question id
# EVALUATION_PROMPT: used to get a 0-100 score for a single answer

# Both prompts:
# - target small local models (llama3.2 / gemma class)
# - ask for a single bare token so the loose parsers can find it
# - are filled with str.format


SELECTION_PROMPT = r"""
Pick one question ID from this list for a {role} {difficulty} interview.
Candidate performance so far: {performance}
{available_questions}

Reply with just the ID, nothing else.
""".strip()


SELECTION_LINE = '- ID: {id} | Topic: {topic} | Difficulty: {difficulty} | Question: "{excerpt}..."'


EVALUATION_PROMPT = r"""
Score this interview answer from 0 to 100.
Question: {question_text}
Answer: {candidate_answer}

Reply with just a number from 0 to 100.
""".strip()
