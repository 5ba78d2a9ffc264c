"""Comment analysis prompt templates — map (per chunk) and reduce (final report).

1. CHUNK_ANALYSIS — one request per comment chunk.
   Variables: {video_json} (video metadata + that chunk's comments).
2. FINAL_REPORT — one request combining every chunk result.
   Variables: {video_json} (metadata only), {partial_analyses} (JSON array).

Literal braces are doubled for ``str.format``.
"""

from __future__ import annotations

CHUNK_ANALYSIS = """\
You are an expert YouTube marketing strategist and data analyst. Perform a \
partial analysis of the YouTube video data below and ONE chunk of its \
comments. Your summary of this chunk will be combined with the summaries of \
the other chunks in a later step.

**Input Data:**
A JSON object with the video's details and this chunk of comments.

{video_json}

**Output:**
Your entire output MUST be a single, minified JSON object: raw JSON starting \
with '{{' and ending with '}}'. Escape every string value properly.

1. 'sentiment_analysis':
   * 'positive_comments': integer count of positive comments in this chunk.
   * 'negative_comments': integer count of negative comments in this chunk.
   * 'neutral_comments': integer count of neutral comments in this chunk.
   * 'summary': one sentence on the sentiment of this chunk.

2. 'key_themes': the top 3-5 themes discussed in this chunk, each with:
   * 'theme_title': short descriptive title (e.g. 'Game Performance Issues').
   * 'summary': 1-3 sentences explaining the theme.
   * 'representative_comment': text of one comment from this chunk that \
best exemplifies it.

3. 'engagement_highlights': the 2 comments in this chunk with the most \
likes plus replies, each with:
   * 'comment_text': the full comment text.
   * 'engagement_count': integer sum of likes and replies.
   * 'reason_for_engagement': why it was engaging (e.g. 'Humorous take').
"""

FINAL_REPORT = """\
You are an expert YouTube marketing strategist and data analyst. Synthesize \
the video metadata and the partial analyses of its comment chunks below into \
one comprehensive final report. Be professional, insightful and encouraging; \
the goal is to help the creator understand their audience and grow their \
channel.

**Video Metadata:**
Overall statistics (view_count, like_count, comment_count). Use these for \
the performance metrics, NOT counts aggregated from the chunks.
{video_json}

**Partial Comment Analyses:**
An array of JSON objects, each summarizing one chunk of comments.
{partial_analyses}

**Output:**
Your entire output MUST be a single, minified JSON object: raw JSON starting \
with '{{' and ending with '}}'. Do NOT wrap it in markdown code blocks. \
Escape every string value properly: double quotes as \\" and backslashes as \\\\.

1. 'executive_summary': 5-10 sentences on overall performance, audience \
reception, and the most critical takeaway for the channel owner.

2. 'performance_metrics':
   * 'video_statistics': 'view_count', 'like_count', 'comment_count' copied \
from the Video Metadata.
   * 'engagement_ratios': 'like_to_view_ratio' (likes/views) and \
'comment_to_view_ratio' (comments/views) as decimal numbers.
   * 'interpretation': 3-10 sentences interpreting these metrics.

3. 'audience_analysis' (object):
   * 'sentiment_label': one of 'Overwhelmingly Positive', 'Positive', \
'Mixed', 'Negative', 'Overwhelmingly Negative'.
   * 'summary': 2-5 sentences on the dominant sentiment and its drivers.
   * 'positive_comments': SUM of 'positive_comments' across partial analyses.
   * 'negative_comments': SUM of 'negative_comments' across partial analyses.
   * 'neutral_comments': SUM of 'neutral_comments' across partial analyses.
   * 'audience_persona': 2-5 sentences describing the likely viewer.

4. 'content_feedback':
   * 'positive_feedback': top 5 positive points, objects with 'point' and \
'representative_comment'.
   * 'constructive_criticism': top 5 criticisms, objects with 'point' and \
'representative_comment'.
   * 'unanswered_questions': top 5 recurring questions, objects with \
'question' and 'representative_comment'.

5. 'key_themes': top 10 themes, objects with 'theme_title', 'summary' \
(2-3 sentences) and 'representative_comment'.

6. 'engagement_highlights': top 10 comments by likes plus replies, objects \
with 'comment_text', 'engagement_count' and 'reason_for_engagement'.

7. 'swot_analysis': 'strengths', 'weaknesses', 'opportunities', 'threats', \
3-5 sentences each.

8. 'actionable_recommendations':
   * 'content_strategy': array of objects with string fields 'idea' and 'reason'.
   * 'video_improvements': array of objects with string fields 'suggestion' \
and 'reason'.
   * 'community_management': a single string with one specific tip.
   * 'monetization_opportunities': array of objects with 'category' (string) \
and 'products' (array of strings).

Output ONLY these fields: 'executive_summary', 'performance_metrics', \
'audience_analysis', 'content_feedback', 'key_themes', \
'engagement_highlights', 'swot_analysis', 'actionable_recommendations'. \
Do NOT include 'tracking_id' or 'run_date'; they are set programmatically.
"""
