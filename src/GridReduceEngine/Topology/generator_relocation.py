# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

from typing import Dict, Iterable, Union
import numpy as np
import networkx as nx

import GridReduceEngine.IO.matpower.matpower_bus_definitions as mpb
import GridReduceEngine.IO.matpower.matpower_gen_definitions as mpg
from GridReduceEngine.IO.matpower.matpower_case import MatpowerCase
from GridReduceEngine.Topology.admittance_model import AdmittanceModel
from GridReduceEngine.Topology.renumbering import BusRenumbering
from GridReduceEngine.basic_structures import IntVec, IntMat, Logger
from GridReduceEngine.exceptions import ConfigurationError


def build_distance_graph(model: AdmittanceModel) -> nx.Graph:
    """
    Electrical distance graph of the structure: edge weight |x| = |1 / w(i, j)|
    :param model: AdmittanceModel
    :return: networkx Graph over the node indices
    """
    G = nx.Graph()
    G.add_nodes_from(int(i) for i in model.nodes)
    for i, j, v in model.edges():
        if v != 0.0:
            G.add_edge(i, j, weight=abs(1.0 / v))
    return G


def _lowest_bus(candidates: Iterable[int], renumbering: BusRenumbering) -> int:
    """
    Among some node indices, pick the one with the lowest original bus number
    """
    return min(candidates, key=lambda m: renumbering.original[m])


def find_relocation_bus(idx: int,
                        retained: set,
                        model_b: AdmittanceModel,
                        renumbering: BusRenumbering,
                        graph: Union[nx.Graph, None] = None,
                        rel_tol: float = 1e-9) -> int:
    """
    Find the retained node that takes the generators of the node idx
    First choice: the retained neighbour with the largest |w| in the second pass structure.
    Otherwise: the closest retained node by electrical distance.
    Ties go to the lowest original bus number.
    :param idx: node index of the generator bus
    :param retained: set of node indices retained by the first pass
    :param model_b: reduced structure of the second pass
    :param renumbering: BusRenumbering
    :param graph: distance graph of model_b (built if None)
    :param rel_tol: relative tolerance to consider two couplings equal
    :return: node index, -1 if none is reachable
    """
    candidates = {m: abs(w) for m, w in model_b.neighbours(idx).items() if m in retained}

    if len(candidates):
        best = max(candidates.values())
        return _lowest_bus([m for m, w in candidates.items() if w >= best * (1.0 - rel_tol)], renumbering)

    if graph is None:
        graph = build_distance_graph(model_b)

    if idx not in graph:
        return -1

    dists = nx.single_source_dijkstra_path_length(graph, idx, weight="weight")
    reachable = {m: d for m, d in dists.items() if m in retained}

    if len(reachable) == 0:
        return -1

    best = min(reachable.values())
    return _lowest_bus([m for m, d in reachable.items() if d <= best * (1.0 + rel_tol)], renumbering)


def relocate_generators(gen_buses: IntVec,
                        retained_a: IntVec,
                        model_b: AdmittanceModel,
                        renumbering: BusRenumbering,
                        logger: Union[Logger, None] = None) -> IntMat:
    """
    Compute the link table of the generators
    :param gen_buses: bus number of every generator
    :param retained_a: node indices retained by the first pass (all external buses eliminated)
    :param model_b: reduced structure of the second pass (external generator buses kept)
    :param renumbering: BusRenumbering
    :param logger: Logger
    :return: Link table (ngen x 2): original generator bus, new generator bus
    """
    if logger is None:
        logger = Logger()

    retained = set(int(i) for i in retained_a)
    graph = None
    destination: Dict[int, int] = dict()

    link = np.zeros((len(gen_buses), 2), dtype=int)

    for g, bus in enumerate(gen_buses):
        bus = int(bus)
        link[g, 0] = bus

        if bus not in destination:
            idx = renumbering.index[bus]

            if idx in retained:
                destination[bus] = bus
            else:
                if graph is None and len([m for m in model_b.neighbours(idx) if m in retained]) == 0:
                    graph = build_distance_graph(model_b)

                new_idx = find_relocation_bus(idx=idx, retained=retained, model_b=model_b,
                                              renumbering=renumbering, graph=graph)
                if new_idx < 0:
                    raise ConfigurationError("External generator bus without a reachable retained bus",
                                             device=bus)

                destination[bus] = int(renumbering.original[new_idx])

        link[g, 1] = destination[bus]

        if link[g, 1] != bus:
            logger.add_info("External generator moved", device=bus, value=link[g, 1],
                            device_class="Generator")

    return link


def update_bus_types(reduced: MatpowerCase, full: MatpowerCase, link: IntMat, logger: Logger):
    """
    Fix the bus types of the reduced case after moving the generators:
    the bus receiving the generators of an eliminated reference bus becomes the reference,
    and PQ buses receiving generators become PV
    :param reduced: reduced MatpowerCase (modified in-place)
    :param full: full MatpowerCase
    :param link: Link table
    :param logger: Logger
    """
    bus_dict = reduced.get_bus_index_dict()
    full_ref = set(int(b) for b in full.get_ref_bus_numbers())

    for old_bus, new_bus in link:
        i = bus_dict[int(new_bus)]
        if int(old_bus) in full_ref and int(old_bus) not in bus_dict:
            if reduced.bus[i, mpb.BUS_TYPE] != mpb.REF:
                reduced.bus[i, mpb.BUS_TYPE] = mpb.REF
                logger.add_info("Reference moved", device=int(old_bus), value=int(new_bus), device_class="Bus")
        elif old_bus != new_bus and reduced.bus[i, mpb.BUS_TYPE] == mpb.PQ:
            reduced.bus[i, mpb.BUS_TYPE] = mpb.PV

    if reduced.nbus > 0 and len(reduced.get_ref_bus_numbers()) == 0:
        # the reference bus was eliminated without generators on it
        gen_buses = reduced.gen[:, mpg.GEN_BUS].astype(int) if reduced.ngen else reduced.bus_numbers
        new_ref = int(np.min(gen_buses))
        reduced.bus[bus_dict[new_ref], mpb.BUS_TYPE] = mpb.REF
        logger.add_warning("Reference bus eliminated, new reference assigned", device=new_ref, device_class="Bus")
