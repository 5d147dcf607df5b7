# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from GridReduceEngine.Topology.preprocessing import preprocess_case, check_external_buses, check_dc_terminals
from GridReduceEngine.Topology.renumbering import BusRenumbering, assign_circuit_numbers
from GridReduceEngine.Topology.admittance_model import AdmittanceModel, build_admittance_model
from GridReduceEngine.Topology.elimination import (EquivalentEdge, EliminationResult, EQUIVALENT_CIRCUIT,
                                                   eliminate_node, eliminate_nodes, tag_equivalent_edges)
from GridReduceEngine.Topology.generator_relocation import relocate_generators, update_bus_types
from GridReduceEngine.Topology.network_reduction import dual_pass_reduction, build_reduced_case, post_filter
