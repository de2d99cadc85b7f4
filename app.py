"""
Flask Web Application for the Pre-TDD Intake Engine

JSON API over the question flow, trigger and validation engine.
Interview state is held by the client and sent with every request.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import BadRequest
import logging
import os

from intake.core.schema_loader import SchemaLoader, SchemaUnavailable, DEFAULT_SCHEMA_DIR
from intake.core.question_flow import QuestionFlowResolver
from intake.core.trigger_engine import TriggerEngine
from intake.core.requirements_validator import RequirementsValidator, check_project_data
from intake.core.interview_flow import InterviewFlow
from intake.core.complexity import analyze_complexity, is_level_sufficient, normalize_tier
from intake.utils.review_helpers import group_answers_by_section, build_document_preview

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SCHEMA_DIR_ENV = 'INTAKE_SCHEMA_DIR'


def create_app(schema_loader=None):
    """
    Build the Flask app.

    Args:
        schema_loader: Optional SchemaLoader (or compatible). Defaults to a
            loader over $INTAKE_SCHEMA_DIR, or schemas/ when unset.
    """
    app = Flask(__name__)

    if schema_loader is None:
        schema_loader = SchemaLoader(os.environ.get(SCHEMA_DIR_ENV, DEFAULT_SCHEMA_DIR))

    # Stateless engine modules, created once per app
    resolver = QuestionFlowResolver(schema_loader)
    trigger_engine = TriggerEngine(schema_loader)
    validator = RequirementsValidator(resolver)

    app.config['SCHEMA_LOADER'] = schema_loader
    app.config['INTERVIEW_FLOW'] = InterviewFlow(resolver, trigger_engine, validator)

    def schema_error(e):
        logger.error(f"Schema unavailable: {e}")
        return jsonify({
            'success': False,
            'error': f"Schema unavailable: {e}"
        }), 503

    def bad_request(e):
        return jsonify({
            'success': False,
            'error': e.description
        }), 400

    @app.route('/api/questions', methods=['GET'])
    def get_questions():
        """Questions for ?complexity=<tier>&tags=a,b"""
        try:
            tier = request.args.get('complexity', 'base')
            tags = _parse_tag_param(request.args.get('tags', ''))

            flow = resolver.build_flow(tier, tags)

            return jsonify({'success': True, **flow.to_dict()})

        except SchemaUnavailable as e:
            return schema_error(e)
        except Exception as e:
            logger.error(f"Error resolving questions: {e}")
            return jsonify({
                'success': False,
                'error': str(e)
            }), 500

    @app.route('/api/tags', methods=['GET'])
    def get_tags():
        """Tag definitions from the tag schema"""
        try:
            tag_schema = schema_loader.load().tag_schema

            return jsonify({
                'success': True,
                'tags': [
                    {'name': name, 'label': info.label, 'description': info.description}
                    for name, info in tag_schema.tags.items()
                ]
            })

        except SchemaUnavailable as e:
            return schema_error(e)
        except Exception as e:
            logger.error(f"Error listing tags: {e}")
            return jsonify({
                'success': False,
                'error': str(e)
            }), 500

    @app.route('/api/triggers', methods=['POST'])
    def post_triggers():
        """One trigger pass over {"answers": {...}}"""
        try:
            data = _json_body()
            answers = _answers_from(data)

            result = trigger_engine.apply_triggers(answers)

            return jsonify({'success': True, **result.to_dict()})

        except BadRequest as e:
            return bad_request(e)
        except SchemaUnavailable as e:
            return schema_error(e)
        except Exception as e:
            logger.error(f"Error applying triggers: {e}")
            return jsonify({
                'success': False,
                'error': str(e)
            }), 500

    @app.route('/api/validate', methods=['POST'])
    def post_validate():
        """Required-field report for {"answers": {...}, "complexity": "<tier>"}"""
        try:
            data = _json_body()
            answers = _answers_from(data)
            tier = data.get('complexity', 'base')

            report = validator.validate(answers, tier)
            project_check = check_project_data(answers)

            return jsonify({
                'success': True,
                **report.to_dict(),
                'project_data': project_check.to_dict()
            })

        except BadRequest as e:
            return bad_request(e)
        except Exception as e:
            logger.error(f"Error validating answers: {e}")
            return jsonify({
                'success': False,
                'error': str(e)
            }), 500

    @app.route('/api/next', methods=['POST'])
    def post_next():
        """
        Next question for {"complexity", "tags", "answers"}.

        The interview is replayed from the answers on every call, so the
        client only needs to keep its answer map.
        """
        try:
            data = _json_body()
            answers = _answers_from(data)
            tier = data.get('complexity', 'base')
            tags = data.get('tags') or []
            if not isinstance(tags, list):
                raise BadRequest("'tags' must be a list")

            flow = app.config['INTERVIEW_FLOW']
            state = flow.start(tier, tags)
            state = flow.commit_answers(state, answers)
            question = flow.next_question(state)

            return jsonify({
                'success': True,
                'finished': question is None,
                'question': question.to_dict() if question else None,
                'remaining': len(flow.pending_questions(state)),
                'state': state.to_json()
            })

        except BadRequest as e:
            return bad_request(e)
        except SchemaUnavailable as e:
            return schema_error(e)
        except Exception as e:
            logger.error(f"Error selecting next question: {e}")
            return jsonify({
                'success': False,
                'error': str(e)
            }), 500

    @app.route('/api/complexity', methods=['POST'])
    def post_complexity():
        """Recommended tier for {"answers": {...}, "complexity": optional}"""
        try:
            data = _json_body()
            answers = _answers_from(data)
            tag_schema = schema_loader.load().tag_schema

            analysis = analyze_complexity(answers, tag_schema)

            response = {
                'success': True,
                'recommended_level': analysis.recommended_level,
                'score': analysis.score,
                'question_count': analysis.question_count,
                'description': analysis.description,
                'risk_factors': vars(analysis.risk_factors),
            }
            if data.get('complexity') is not None:
                requested = data['complexity']
                response['requested_level'] = normalize_tier(requested)
                response['sufficient'] = is_level_sufficient(requested, answers, tag_schema)

            return jsonify(response)

        except BadRequest as e:
            return bad_request(e)
        except SchemaUnavailable as e:
            return schema_error(e)
        except Exception as e:
            logger.error(f"Error analyzing complexity: {e}")
            return jsonify({
                'success': False,
                'error': str(e)
            }), 500

    @app.route('/api/review', methods=['POST'])
    def post_review():
        """Answers grouped by document section plus a completeness preview"""
        try:
            data = _json_body()
            answers = _answers_from(data)
            tier = data.get('complexity', 'base')

            return jsonify({
                'success': True,
                'sections': group_answers_by_section(answers, schema_loader.load()),
                'preview': build_document_preview(answers, tier)
            })

        except BadRequest as e:
            return bad_request(e)
        except SchemaUnavailable as e:
            return schema_error(e)
        except Exception as e:
            logger.error(f"Error building review: {e}")
            return jsonify({
                'success': False,
                'error': str(e)
            }), 500

    return app


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')
    return data


def _answers_from(data):
    answers = data.get('answers', {})
    if answers is None:
        return {}
    if not isinstance(answers, dict):
        raise BadRequest("'answers' must be an object")
    return answers


def _parse_tag_param(raw):
    return [tag.strip() for tag in raw.split(',') if tag.strip()]


app = create_app()


if __name__ == '__main__':
    print("\n" + "="*60)
    print("PRE-TDD INTAKE ENGINE - JSON API")
    print("="*60)
    print(f"\nSchema directory: {os.environ.get(SCHEMA_DIR_ENV, DEFAULT_SCHEMA_DIR)}")
    print("Endpoints under http://localhost:5000/api/")
    print("\nPress Ctrl+C to stop the server")
    print("="*60 + "\n")

    app.run(debug=True, host='0.0.0.0', port=5000)
