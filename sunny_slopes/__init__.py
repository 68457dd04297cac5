"""Sunny Slopes - Plan a ski day that follows the sun.

Locates the sun for any place and instant, decides whether a slope is lit,
and plans a sequence of lift rides and descents that covers as many runs as
possible while favoring sunlit terrain.

Modules:
    core: Foundation classes (geo calculations, ephemeris, shade model, exposure scoring)
    model: Data structures (GeoPoint, RunDescriptor, LiftDescriptor, PlanRequest, RoutePlan)
    planner: Route graph, planning state machine and greedy planner
    service: Request boundary (plan_day, plan_route, sun_position, sun_times)

Example:
    from sunny_slopes.model import PlanRequest, SkiAreaTopology
    from sunny_slopes.service import plan_day
"""
