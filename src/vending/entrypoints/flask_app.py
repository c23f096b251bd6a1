"""
Point d'entrée Flask.

L'API est un thin adapter : elle déclenche une simulation et répond
par un message fixe. Aucun corps de requête n'est lu ; une erreur non
gérée pendant la simulation donne une erreur 500 générique.
"""

from __future__ import annotations

import logging

from flask import Flask

from vending import config
from vending.service_layer import simulation


app = Flask(__name__)


@app.route("/api/run-simulate", methods=["POST"])
def run_simulate_endpoint():
    """
    POST /api/run-simulate

    Exécute une simulation complète puis répond "Simulation completed".
    """
    simulation.run_simulation()
    return "Simulation completed", 200


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(host=config.get_api_host(), port=config.get_api_port())
