"""
Facial expression threat prompt
"""

ANALYZE_FACIAL_EXPRESSIONS_PROMPT_TEMPLATE = """You are a security expert analyzing facial expressions to detect potential threats.
Analyze the provided facial expression and determine the dominant emotion, its intensity (0-1), and the associated risk level.

Zone: {zone}

Based on the analysis, provide a description and assign a risk level (Normal, Medium, or High).
Consider "anger" and "fear" as strong emotions that may indicate a potential issue. Set is_strong_emotion to true if these are detected.
If no particular threat is detected, provide a brief, one-sentence description of the scene in the "description" field.

Respond with ONLY a single JSON object (no markdown or code fences) matching this JSON schema:
{output_schema}
"""
