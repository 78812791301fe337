"""
Face matching prompt
"""

FACE_MATCH_PROMPT_TEMPLATE = """You are an expert in face recognition and analysis.

You are provided with three images, in this order: a target photo, a snapshot from Zone A, and a snapshot from Zone B.

Analyze the images and determine if the target face is present in either zone.

Provide a confidence percentage (0-100) for each zone, indicating the likelihood of a face match.
If a match is found, provide a timestamp for when the face was first seen in Zone A (first_seen_timestamp_zone_a) and last seen in Zone B (last_seen_timestamp_zone_b). If no match is found, leave the timestamp fields null.

Respond with ONLY a single JSON object (no markdown or code fences) matching this JSON schema:
{output_schema}
"""
