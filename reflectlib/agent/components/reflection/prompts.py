"""
Default evaluator prompt templates for the reflection loop.

Templates use ``{{variable}}`` placeholders rendered by ``PromptRenderer``.
The evaluator templates receive ``task``; the criteria variant also
receives ``evaluationCriteria``.
"""

_EVALUATION_GUIDELINES = '''
**Your Evaluation Guidelines:**

When you receive a solution to evaluate, please provide a detailed assessment in JSON format:

```json
{
  "score": <integer 1-10>,
  "pass": <boolean, whether it meets all critical requirements>,
  "should_continue": <boolean, whether improvement is recommended>,
  "confidence": <float 0.0-1.0, how confident you are in this evaluation>,
  "strengths": ["list of specific strengths"],
  "weaknesses": ["list of specific issues"],
  "suggestions": ["actionable recommendations for improvement"],
  "dimensions": {"<criterion name>": <integer 1-10>}
}
```

**Scoring Guidelines:**
- **9-10**: Excellent, meets all requirements perfectly
- **7-8**: Good, meets most requirements with minor issues
- **5-6**: Adequate, but has significant gaps
- **3-4**: Poor, missing major requirements
- **1-2**: Inadequate, needs complete rework

**Termination Logic:**
- Set `should_continue: false` if score >= 8 and all critical requirements are met
- Set `should_continue: true` if improvements are still needed

**Important:**
- Provide your evaluation as valid JSON
- Be specific and actionable in your feedback
- Focus on helping improve the solution iteratively
'''

EVALUATION_USER_MESSAGE_TEMPLATE = '''**Solution to Evaluate:**

{{solution}}

Please provide your evaluation in the JSON format specified in the system prompt.
'''

IMPROVEMENT_PROMPT_HEADER = "Based on the evaluation feedback, please improve your solution."
IMPROVEMENT_PROMPT_FOOTER = "Please provide an improved solution that addresses these points."

DEFAULT_REFLECTION_TEMPLATE = '''
You are an expert evaluator. Your role is to assess how well solutions accomplish the given task and give constructive feedback.

**Original Task:**
{{task}}
''' + _EVALUATION_GUIDELINES

DEFAULT_REFLECTION_WITH_CRITERIA_TEMPLATE = '''
You are an expert evaluator. Your role is to assess solutions based on the provided criteria and give constructive feedback.

**Original Task:**
{{task}}

**Evaluation Criteria (Business Standards):**
{{evaluationCriteria}}
''' + _EVALUATION_GUIDELINES
