"""Linearizability checking of operation and event histories, with HTML visualisation."""