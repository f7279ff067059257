"""
Web interface for Dicecast.

JSON API over the geometry forge, the notation parser and headless rolls.
- GET  /api/dice: Summary of every supported die type
- GET  /api/dice/<type>: Full descriptor of one die type (with meshes)
- POST /api/parse: Parse notation without rolling
- POST /api/roll: Throw the dice in a headless world and return the result
"""

import logging
from typing import Optional

from flask import Flask, jsonify, request

from ..core.config import Config, get_config
from ..engine import roll_headless
from ..geometry import UnsupportedDieType, descriptor_table, get_descriptor
from ..notation import DiceParser

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None) -> Flask:
    """
    Create the Flask app.

    Args:
        config: Settings (defaults to the global config)

    Returns:
        Flask app
    """
    config = config or get_config()

    app = Flask(__name__)
    app.config['DICECAST'] = config

    def notation_from_request():
        data = request.get_json(silent=True) or {}
        notation = data.get('notation')
        if not isinstance(notation, str) or not notation.strip():
            return None, data
        return notation, data

    @app.route('/api/dice')
    def api_dice():
        """JSON API: List supported die types."""
        table = descriptor_table()
        return jsonify({
            'dice': [descriptor.to_dict(include_mesh=False) for descriptor in table.values()]
        })

    @app.route('/api/dice/<die_type>')
    def api_die(die_type: str):
        """JSON API: Full descriptor of one die type."""
        try:
            descriptor = get_descriptor(die_type)
        except UnsupportedDieType as e:
            return jsonify({'error': str(e)}), 404

        include_mesh = request.args.get('mesh', 'true').lower() != 'false'
        return jsonify(descriptor.to_dict(include_mesh=include_mesh))

    @app.route('/api/parse', methods=['POST'])
    def api_parse():
        """JSON API: Parse notation."""
        notation, _ = notation_from_request()
        if notation is None:
            return jsonify({'error': 'notation is required'}), 400

        spec = DiceParser.parse(notation)
        data = spec.to_dict()
        data['canonical'] = spec.to_notation()
        data['dice'] = spec.dice_count()
        return jsonify(data)

    @app.route('/api/roll', methods=['POST'])
    def api_roll():
        """JSON API: Roll notation to completion in a headless world."""
        notation, data = notation_from_request()
        if notation is None:
            return jsonify({'error': 'notation is required'}), 400

        seed = data.get('seed')
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            return jsonify({'error': 'seed must be an integer'}), 400

        spec = DiceParser.parse(notation)
        if spec.is_empty and spec.modifier == 0:
            return jsonify({'error': f"Nothing to roll in '{notation}'"}), 400
        if spec.dice_count() > config.max_dice:
            return jsonify({
                'error': f"Too many dice: {spec.dice_count()} (max {config.max_dice})"
            }), 400

        result = roll_headless(notation, seed=seed, config=config)
        if result is None:
            logger.error(f"Roll '{notation}' did not settle within {config.max_frames} frames")
            return jsonify({'error': 'Dice did not settle'}), 500

        return jsonify(result.to_dict())

    return app


def main():
    """Run development server."""
    import argparse

    config = get_config()

    parser = argparse.ArgumentParser(description='Dicecast Web API')
    parser.add_argument('--host', default=config.host, help='Host to bind to')
    parser.add_argument('--port', type=int, default=config.port, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', default=config.debug, help='Enable debug mode')

    args = parser.parse_args()
    run_server(args.host, args.port, args.debug, config)


def run_server(host: str, port: int, debug: bool = False, config: Optional[Config] = None):
    app = create_app(config)

    print(f"\n╔══════════════════════════════════════════════════╗")
    print(f"║     Dicecast Web API                             ║")
    print(f"╚══════════════════════════════════════════════════╝")
    print(f"")
    print(f"  Server URL:       http://{host}:{port}")
    print(f"")
    print(f"  Endpoints:")
    print(f"   • GET  /api/dice")
    print(f"   • GET  /api/dice/<type>")
    print(f"   • POST /api/parse")
    print(f"   • POST /api/roll")
    print(f"")
    print(f"  Press Ctrl+C to stop")
    print(f"")

    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    main()
