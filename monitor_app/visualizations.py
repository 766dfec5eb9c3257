"""Visualization utilities for recorded simulation runs."""

import plotly.graph_objects as go
from typing import List, Dict
import pandas as pd


def create_price_chart(steps: List[Dict]):
    """Create line chart of the fair price against the pool's spot price."""
    df = pd.DataFrame([
        {'Step': s['step'], 'Fair': s['fair_price'], 'Pool': s['spot_price']}
        for s in steps
    ])

    fig = go.Figure()

    if not df.empty:
        fig.add_trace(go.Scatter(
            x=df['Step'],
            y=df['Fair'],
            mode='lines',
            name='Fair price',
            line=dict(color='#2196F3', width=2)
        ))

        fig.add_trace(go.Scatter(
            x=df['Step'],
            y=df['Pool'],
            mode='lines',
            name='Pool price',
            line=dict(color='#FF9800', width=1, dash='dot')
        ))

    fig.update_layout(
        title='Fair vs Pool Price',
        xaxis_title='Step',
        yaxis_title='Price (token1 per token0)',
        hovermode='x unified',
        template='plotly_white',
        height=400
    )

    return fig


def create_allocation_chart(steps: List[Dict], asset: str):
    """Create stacked area chart of idle vs deposited holdings for one asset."""
    steps_x = [s['step'] for s in steps]
    idle = [s['idle'].get(asset, 0) for s in steps]
    deposited = [s['deposited'].get(asset, 0) for s in steps]

    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=steps_x,
        y=idle,
        mode='lines',
        name='Idle',
        stackgroup='holdings',
        line=dict(color='#4CAF50')
    ))

    fig.add_trace(go.Scatter(
        x=steps_x,
        y=deposited,
        mode='lines',
        name='Deposited',
        stackgroup='holdings',
        line=dict(color='#9C27B0')
    ))

    fig.update_layout(
        title=f'{asset} Holdings',
        xaxis_title='Step',
        yaxis_title='Base units',
        template='plotly_white',
        height=400
    )

    return fig


def create_utilization_chart(steps: List[Dict]):
    """Create line chart of lending utilization per asset."""
    assets = sorted({asset for s in steps for asset in s['utilization_bps']})
    colors = ['#4CAF50', '#FF9800', '#2196F3', '#9C27B0']

    fig = go.Figure()

    for i, asset in enumerate(assets):
        fig.add_trace(go.Scatter(
            x=[s['step'] for s in steps],
            y=[s['utilization_bps'].get(asset, 0) / 100 for s in steps],  # Convert to %
            mode='lines',
            name=asset,
            line=dict(color=colors[i % len(colors)], width=2)
        ))

    fig.update_layout(
        title='Lending Utilization',
        xaxis_title='Step',
        yaxis_title='Utilization (%)',
        template='plotly_white',
        height=400,
        yaxis_range=[0, 105]
    )

    return fig


def create_event_count_chart(event_counts: Dict[str, int]):
    """Create bar chart of router events by type."""
    df = pd.DataFrame(
        [{'event': name, 'count': count} for name, count in event_counts.items()]
    )

    if df.empty:
        return None

    df = df.sort_values('count', ascending=False)

    fig = go.Figure()

    fig.add_trace(go.Bar(
        x=df['event'],
        y=df['count'],
        marker_color='#4CAF50',
        text=[str(c) for c in df['count']],
        textposition='outside'
    ))

    fig.update_layout(
        title='Router Events',
        xaxis_title='Event',
        yaxis_title='Count',
        template='plotly_white',
        height=400
    )

    return fig


def create_reserve_ratio_chart(comparison: List[Dict]):
    """Create bar chart of trade failure rate by reserve ratio."""
    df = pd.DataFrame(comparison)

    if df.empty:
        return None

    fig = go.Figure()

    fig.add_trace(go.Bar(
        x=[f"{r / 100:.0f}%" for r in df['reserve_ratio_bps']],
        y=df['failure_rate'] * 100,
        name='Failed trades',
        marker_color='#F44336',
        text=[f"{fr:.1f}%" for fr in df['failure_rate'] * 100],
        textposition='outside'
    ))

    fig.add_trace(go.Bar(
        x=[f"{r / 100:.0f}%" for r in df['reserve_ratio_bps']],
        y=df['avg_withdrawals'],
        name='Withdrawals per run',
        marker_color='#2196F3',
        yaxis='y2'
    ))

    fig.update_layout(
        title='Reserve Ratio Trade-off',
        xaxis_title='Reserve ratio',
        yaxis=dict(title='Failed trades (%)'),
        yaxis2=dict(title='Withdrawals per run', overlaying='y', side='right'),
        barmode='group',
        template='plotly_white',
        height=400
    )

    return fig
