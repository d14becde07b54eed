"""
Prompt templates for content extraction.

Templates with {placeholders} are filled with str.format. DOCUMENT_EXTRACTION_PROMPT
and IMAGE_DESCRIPTION_PROMPT are sent as-is.

System role: Prompt catalog for the per-modality extractors
"""

DOCUMENT_EXTRACTION_PROMPT = """Analyze this document and extract ALL content. Return a JSON array with the following structure:

[
  {
    "type": "text",
    "content": "The actual text content from this section",
    "page_idx": 0
  },
  {
    "type": "table",
    "content": "| Header1 | Header2 |\\n|---------|---------|\\n| Cell1 | Cell2 |",
    "page_idx": 1
  }
]

Rules:
1. Extract ALL text content, preserving paragraph structure
2. Convert tables to markdown format
3. For images/charts/diagrams, describe them as text with type "image" and prefix with "[Figure: ...]" or "[Chart: ...]"
4. Set page_idx to the actual page number (0-indexed)
5. Maintain the order of content as it appears in the document
6. Be thorough - extract everything, don't summarize
7. Return ONLY valid JSON, no additional text

Extract the document content now:"""

TABLE_DESCRIPTION_PROMPT = """Analyze this table and provide a comprehensive description.

Table content:
{table_markdown}

Include:
1. **Purpose**: What information does this table convey?
2. **Structure**: How many rows/columns? What are the headers?
3. **Key Data Points**: Highlight the most important values or trends
4. **Insights**: What conclusions can be drawn from this data?
5. **Context**: What questions could this table answer?

Format your response as a descriptive paragraph suitable for semantic search. Be concise but thorough."""

IMAGE_DESCRIPTION_PROMPT = """Analyze this image and provide a detailed description for search and retrieval purposes.

Include:
1. **Main Subject**: What is the primary focus of the image?
2. **Visual Elements**: Describe key objects, people, text, colors, layout
3. **Context**: What setting or scenario does this represent?
4. **Technical Details**: If it's a chart/diagram/screenshot, describe the data or information shown
5. **Relevance**: What topics or queries might this image be relevant for?

Format your response as a single paragraph optimized for semantic search. Be descriptive and specific."""

VIDEO_OVERVIEW_PROMPT = """Analyze this video and provide:

1. **Overall Summary**: What is this video about? (2-3 sentences)
2. **Key Topics**: What main topics or themes are covered?
3. **Timeline**: Provide timestamps for major sections or key moments (format: MM:SS - Description)
4. **Duration**: Estimate the total video duration

Format your response as structured text that can be used for search and retrieval."""

VIDEO_SEGMENT_PROMPT = """Analyze this video segment and provide a detailed description for search and retrieval.

Segment timeframe: {start_time} - {end_time}

Describe:
1. **Visual Content**: What is shown in the video frames?
2. **Actions**: What activities or movements occur?
3. **Audio/Speech**: Summarize any spoken content or sounds
4. **Key Moments**: What are the most significant events in this segment?
5. **Context**: How does this segment relate to the overall video?

Format as a searchable paragraph that captures both visual and audio content. Be specific and descriptive."""

VIDEO_TOPIC_SEGMENT_PROMPT = """For the video segment from {start_time} to {end_time}, which covers: "{topic}"

Provide a detailed description including:
- What visual elements are present
- Any spoken content or dialogue
- Key actions or events
- Important details for search relevance

Format as a single paragraph."""

AUDIO_TRANSCRIPTION_PROMPT = """Analyze this audio file and provide:

1. **Full Transcription**: Transcribe all spoken content verbatim. Include speaker labels if multiple speakers are present (e.g., "Speaker 1:", "Speaker 2:").

2. **Summary**: Provide a 2-3 sentence summary of the main topics discussed.

3. **Key Points**: List the main points or takeaways.

4. **Timestamps**: If notable, provide approximate timestamps for topic changes (format: MM:SS - Topic).

Format the transcription clearly with proper punctuation and paragraph breaks. The transcription should be complete and accurate."""

AUDIO_SEGMENT_PROMPT = """For the audio segment from {start_time} to {end_time}, which covers: "{topic}"

Provide:
1. Complete transcription of this segment
2. Key points discussed

Format as clean text suitable for search."""
